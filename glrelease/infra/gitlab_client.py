"""
GitLab API client infrastructure for glrelease.

Implements the RepositoryHost protocol on top of the GitLab REST API v4:
- Tags, releases and release links of a single project
- Uploads to the project's file store (the URLs asset links point at)
- Downloads of uploaded files and generated source archives

HTTP failures are translated into the glrelease error taxonomy:
404 -> NotFoundError, 409 -> ConflictError, 429/5xx and network errors ->
TransientHostError, anything else -> HostError. No retries happen here;
callers decide what is worth retrying.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import quote, urlparse

import requests

from ..config import DEFAULT_API_URL, Source
from ..domain.release import (
    AssetLink,
    ProjectFile,
    Release,
    ReleasePage,
    Tag,
    TagPage,
)
from ..exit_codes import ConflictError, HostError, NotFoundError, TransientHostError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _next_page(response: requests.Response, page: int) -> Optional[int]:
    """
    Read the pagination headers of a listing response.

    GitLab sends X-Next-Page (empty on the last page); X-Total-Pages is used
    when the former is missing.
    """
    next_page = response.headers.get('X-Next-Page', '').strip()
    if next_page.isdigit():
        return int(next_page)
    if 'X-Next-Page' in response.headers:
        return None

    total_pages = response.headers.get('X-Total-Pages', '').strip()
    if total_pages.isdigit() and page < int(total_pages):
        return page + 1
    return None


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or response.reason or ''
    if isinstance(data, dict):
        message = data.get('message') or data.get('error') or data
        return str(message)
    return str(data)


class GitLabClient:
    """
    GitLab REST client bound to one project.

    Example:
        with GitLabClient(source) as client:
            page = client.list_tags()
            for tag in page.tags:
                print(tag.name, tag.commit_sha)
    """

    def __init__(self, source: Source, timeout: int = DEFAULT_TIMEOUT):
        """
        Initialize GitLabClient.

        Args:
            source: Connection settings (project, token, API URL, TLS mode)
            timeout: HTTP request timeout in seconds
        """
        self.repository = source.repository
        self.api_url = (source.gitlab_api_url or DEFAULT_API_URL).rstrip('/')
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': 'glrelease',
        })
        if source.access_token:
            self.session.headers['PRIVATE-TOKEN'] = source.access_token
        if source.insecure:
            logger.warning(f"TLS certificate verification disabled for {self.api_url}")
            self.session.verify = False

    def __enter__(self) -> 'GitLabClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # URLs
    # ------------------------------------------------------------------

    @property
    def project_url(self) -> str:
        return f"{self.api_url}/projects/{quote(self.repository, safe='')}"

    @property
    def web_url(self) -> str:
        """Instance root without the API suffix (e.g. https://gitlab.com)."""
        if self.api_url.endswith('/api/v4'):
            return self.api_url[:-len('/api/v4')]
        return self.api_url

    def _release_url(self, tag_name: str) -> str:
        return f"{self.project_url}/releases/{quote(tag_name, safe='')}"

    def resolve_file_url(self, url: str) -> str:
        """
        Turn an upload reference into an absolute URL.

        Uploads are returned as "/uploads/<hash>/<file>", relative to the
        project's web page rather than the API.
        """
        if urlparse(url).scheme:
            return url
        # full_path form: "/group/project/uploads/..." or "/-/project/<id>/uploads/..."
        if url.startswith(f"/{self.repository}/") or url.startswith('/-/'):
            return f"{self.web_url}{url}"
        return f"{self.web_url}/{self.repository}/{url.lstrip('/')}"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request and map failures onto the error taxonomy."""
        kwargs.setdefault('timeout', self.timeout)
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TransientHostError(f"{method} {url} failed: {e}") from e
        except requests.RequestException as e:
            raise HostError(f"{method} {url} failed: {e}") from e

        status = response.status_code
        if status < 400:
            return response

        message = f"{method} {url}: HTTP {status}: {_error_message(response)}"
        if status == 404:
            raise NotFoundError(message)
        if status == 409:
            raise ConflictError(message)
        if status == 429 or status >= 500:
            raise TransientHostError(message, status=status)
        raise HostError(message, status=status)

    def _json(self, method: str, url: str, **kwargs) -> Any:
        response = self._request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise HostError(f"{method} {url} returned invalid JSON: {e}") from e

    def _get_page(self, url: str, page: int, per_page: int,
                  params: Optional[Dict[str, Any]] = None) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        query = dict(params or {})
        query.update({'page': page, 'per_page': per_page})
        response = self._request('GET', url, params=query)
        try:
            data = response.json()
        except ValueError as e:
            raise HostError(f"GET {url} returned invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise HostError(f"GET {url} returned {type(data).__name__}, expected a list")
        return data, _next_page(response, page)

    def _paginate(self, url: str, per_page: int = DEFAULT_PAGE_SIZE) -> Iterator[Dict[str, Any]]:
        page: Optional[int] = 1
        while page is not None:
            items, page = self._get_page(url, page, per_page)
            yield from items

    # ------------------------------------------------------------------
    # Tags and releases
    # ------------------------------------------------------------------

    def list_tags(self, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> TagPage:
        items, next_page = self._get_page(
            f"{self.project_url}/repository/tags",
            page,
            per_page,
            params={'order_by': 'updated', 'sort': 'desc'},
        )
        return TagPage(tags=[Tag.from_api_response(item) for item in items], next_page=next_page)

    def list_releases(self, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> ReleasePage:
        items, next_page = self._get_page(
            f"{self.project_url}/releases",
            page,
            per_page,
            params={'order_by': 'released_at', 'sort': 'desc'},
        )
        return ReleasePage(
            releases=[Release.from_api_response(item) for item in items],
            next_page=next_page,
        )

    def get_tag(self, name: str) -> Tag:
        data = self._json('GET', f"{self.project_url}/repository/tags/{quote(name, safe='')}")
        return Tag.from_api_response(data)

    def get_release(self, tag_name: str) -> Release:
        return Release.from_api_response(self._json('GET', self._release_url(tag_name)))

    def create_tag(self, name: str, ref: str) -> Tag:
        data = self._json(
            'POST',
            f"{self.project_url}/repository/tags",
            json={'tag_name': name, 'ref': ref, 'message': name},
        )
        return Tag.from_api_response(data)

    def create_release(self, tag_name: str, name: str, description: Optional[str] = None) -> Release:
        payload = {'tag_name': tag_name, 'name': name}
        if description is not None:
            payload['description'] = description
        return Release.from_api_response(
            self._json('POST', f"{self.project_url}/releases", json=payload)
        )

    def update_release(self, tag_name: str, name: str, description: Optional[str] = None) -> Release:
        payload = {'name': name}
        if description is not None:
            payload['description'] = description
        return Release.from_api_response(
            self._json('PUT', self._release_url(tag_name), json=payload)
        )

    # ------------------------------------------------------------------
    # Release links
    # ------------------------------------------------------------------

    def list_release_links(self, tag_name: str) -> List[AssetLink]:
        url = f"{self._release_url(tag_name)}/assets/links"
        return [AssetLink.from_api_response(item) for item in self._paginate(url)]

    def create_release_link(self, tag_name: str, name: str, url: str) -> AssetLink:
        data = self._json(
            'POST',
            f"{self._release_url(tag_name)}/assets/links",
            json={'name': name, 'url': url},
        )
        return AssetLink.from_api_response(data)

    def delete_release_link(self, tag_name: str, link_id: int) -> None:
        self._request('DELETE', f"{self._release_url(tag_name)}/assets/links/{link_id}")

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def upload_file(self, path: Path) -> ProjectFile:
        path = Path(path)
        with open(path, 'rb') as fh:
            data = self._json(
                'POST',
                f"{self.project_url}/uploads",
                files={'file': (path.name, fh)},
            )
        uploaded = ProjectFile.from_api_response(data)
        return ProjectFile(
            url=self.resolve_file_url(uploaded.full_path or uploaded.url),
            alt=uploaded.alt,
            full_path=uploaded.full_path,
            markdown=uploaded.markdown,
        )

    def download_file(self, url: str, dest: Path) -> Path:
        """
        Download a file to dest.

        The access token is only sent to the GitLab instance itself, never to
        third-party hosts a release link may point to.
        """
        absolute = self.resolve_file_url(url)
        own_host = urlparse(absolute).netloc == urlparse(self.web_url).netloc
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        if own_host:
            response = self._request('GET', absolute, stream=True)
        else:
            try:
                response = requests.get(absolute, stream=True, timeout=self.timeout,
                                        verify=self.session.verify)
            except (requests.ConnectionError, requests.Timeout) as e:
                raise TransientHostError(f"GET {absolute} failed: {e}") from e
            except requests.RequestException as e:
                raise HostError(f"GET {absolute} failed: {e}") from e
            if response.status_code >= 400:
                raise HostError(
                    f"failed to download file `{dest.name}`: HTTP status {response.status_code}",
                    status=response.status_code,
                )

        try:
            with response:
                with open(dest, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            dest.unlink(missing_ok=True)
            raise TransientHostError(f"downloading {dest.name} from {absolute} failed: {e}") from e

        logger.info(f"Downloaded {dest.name}")
        return dest
