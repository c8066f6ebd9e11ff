"""
Release domain objects for glrelease.

Plain value objects built from GitLab API payloads:
- Tag: named pointer to a commit, optionally carrying release metadata
- Release: name, description and asset links attached to a tag
- AssetLink / ReleaseSource: downloadable artifacts of a release
- ProjectFile: a file uploaded to the project's file store
- Version / MetadataPair: what the CI orchestrator reads back
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ReleaseStub:
    """Release metadata embedded in a tag listing."""
    tag_name: str
    description: str = ""


@dataclass(frozen=True)
class Tag:
    """
    A git tag on the hosted repository.

    Attributes:
        name: Tag name (e.g. "v1.2.0")
        commit_sha: Id of the tagged commit
        committed_date: ISO timestamp of the tagged commit, the host's
            ordering key for tag listings
        message: Annotation message
        release: Attached release metadata, None for a plain tag
    """
    name: str
    commit_sha: str = ""
    committed_date: Optional[str] = None
    message: str = ""
    release: Optional[ReleaseStub] = None

    @property
    def has_release(self) -> bool:
        return self.release is not None

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Tag':
        """Create from a GitLab tag payload."""
        commit = data.get('commit') or {}
        release = data.get('release')
        stub = None
        if isinstance(release, dict):
            stub = ReleaseStub(
                tag_name=release.get('tag_name') or data.get('name', ''),
                description=release.get('description') or '',
            )
        return cls(
            name=data.get('name', ''),
            commit_sha=commit.get('id') or '',
            committed_date=commit.get('committed_date'),
            message=data.get('message') or '',
            release=stub,
        )


@dataclass(frozen=True)
class AssetLink:
    """A named URL on a release."""
    id: int
    name: str
    url: str

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'AssetLink':
        return cls(id=data.get('id', 0), name=data.get('name', ''), url=data.get('url', ''))


@dataclass(frozen=True)
class ReleaseSource:
    """A source archive generated by the host for a release."""
    format: str
    url: str


@dataclass(frozen=True)
class Release:
    """
    A release attached to a tag.

    Attributes:
        tag_name: Tag the release belongs to
        name: Display name
        description: Markdown body
        commit_sha: Id of the tagged commit
        links: Asset links
        sources: Generated source archives
    """
    tag_name: str
    name: str = ""
    description: str = ""
    commit_sha: str = ""
    links: List[AssetLink] = field(default_factory=list)
    sources: List[ReleaseSource] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'Release':
        """Create from a GitLab release payload."""
        commit = data.get('commit') or {}
        assets = data.get('assets') or {}
        return cls(
            tag_name=data.get('tag_name', ''),
            name=data.get('name') or '',
            description=data.get('description') or '',
            commit_sha=commit.get('id') or '',
            links=[AssetLink.from_api_response(link) for link in assets.get('links') or []],
            sources=[
                ReleaseSource(format=source.get('format', ''), url=source.get('url', ''))
                for source in assets.get('sources') or []
            ],
        )


@dataclass(frozen=True)
class ProjectFile:
    """A file uploaded to the project's file store."""
    url: str
    alt: str = ""
    full_path: str = ""
    markdown: str = ""

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'ProjectFile':
        return cls(
            url=data.get('url', ''),
            alt=data.get('alt', ''),
            full_path=data.get('full_path', ''),
            markdown=data.get('markdown', ''),
        )


@dataclass(frozen=True)
class TagPage:
    """One page of a tag listing; next_page is None on the last page."""
    tags: List[Tag]
    next_page: Optional[int] = None


@dataclass(frozen=True)
class ReleasePage:
    """One page of a release listing; next_page is None on the last page."""
    releases: List[Release]
    next_page: Optional[int] = None


@dataclass(frozen=True)
class Version:
    """
    The cursor exchanged with the CI orchestrator.

    Only `tag` is meaningful to glrelease; `commit_sha` is informative.
    """
    tag: str
    commit_sha: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Version']:
        """Parse a request's version object; None or an empty tag means no version."""
        if not data or not data.get('tag'):
            return None
        return cls(tag=str(data['tag']), commit_sha=str(data.get('commit_sha') or ''))

    @classmethod
    def from_tag(cls, tag: Tag) -> 'Version':
        return cls(tag=tag.name, commit_sha=tag.commit_sha)

    def to_dict(self) -> Dict[str, str]:
        result = {'tag': self.tag}
        if self.commit_sha:
            result['commit_sha'] = self.commit_sha
        return result


@dataclass(frozen=True)
class MetadataPair:
    """A name/value pair shown by the orchestrator next to a version."""
    name: str
    value: str
    markdown: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'name': self.name, 'value': self.value}
        if self.markdown:
            result['markdown'] = True
        return result


def metadata_from_release(release: Release, commit_sha: str = "") -> List[MetadataPair]:
    """
    Project a release into display metadata.

    Order is name, tag, commit_sha, body; empty values are left out and the
    body is flagged as markdown.
    """
    metadata = []
    if release.name:
        metadata.append(MetadataPair(name='name', value=release.name))
    metadata.append(MetadataPair(name='tag', value=release.tag_name))

    sha = commit_sha or release.commit_sha
    if sha:
        metadata.append(MetadataPair(name='commit_sha', value=sha))
    if release.description:
        metadata.append(MetadataPair(name='body', value=release.description, markdown=True))
    return metadata
