"""
Fetch service for glrelease.

Materializes one release in a directory for the next steps of a pipeline:

    <dest>/tag          tag name
    <dest>/version      version token extracted by the tag filter
    <dest>/commit_sha   tagged commit
    <dest>/body         release description
    <dest>/<link name>  each selected asset link
    <dest>/<archive>    each selected source archive
"""

import fnmatch
import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import urlparse

from ..domain.release import MetadataPair, Release, Version, metadata_from_release
from ..domain.request import InRequest
from ..domain.version import TagFilter, VersionParser
from ..exit_codes import ConfigurationError, HostError, NotFoundError
from ..infra.host import RepositoryHost

logger = logging.getLogger(__name__)


def match_asset(name: str, globs: List[str]) -> bool:
    """True when no globs are given or the name matches one of them."""
    if not globs:
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in globs)


def destination_path(dest_dir: Path, name: str) -> Path:
    """
    Path inside dest_dir for a file named by the host.

    Raises:
        HostError: the name is empty, contains a path separator, or would land
            outside dest_dir
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise HostError(f"refusing to write release file with unsafe name {name!r}")
    path = dest_dir / name
    if path.resolve().parent != dest_dir.resolve():
        raise HostError(f"refusing to write release file outside {dest_dir}: {name!r}")
    return path


@dataclass
class InResponse:
    version: Version
    metadata: List[MetadataPair] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version.to_dict(),
            'metadata': [pair.to_dict() for pair in self.metadata],
        }


class FetchService:
    """
    Downloads a release's metadata and selected artifacts.

    Example:
        service = FetchService(client)
        response = service.run(Path("/tmp/build/get"), request)
    """

    def __init__(self, host: RepositoryHost):
        self.host = host

    def run(self, dest_dir: Path, request: InRequest) -> InResponse:
        """
        Fetch the release named by the request's version.

        Raises:
            ConfigurationError: no version tag in the request, or a bad tag_filter
            NotFoundError: the release does not exist
            HostError: any other host failure
        """
        if request.version is None or not request.version.tag:
            raise ConfigurationError("missing required version tag")

        parser = VersionParser(TagFilter.compile(request.source.tag_filter))
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)

        try:
            release = self.host.get_release(request.version.tag)
        except NotFoundError as e:
            raise NotFoundError(f"no release for tag {request.version.tag}") from e

        # Every target is checked before anything is written
        downloads = [
            (link.url, destination_path(dest_dir, link.name))
            for link in release.links
            if match_asset(link.name, request.params.globs)
        ]
        formats = request.params.source_formats()
        downloads.extend(
            (source.url, destination_path(dest_dir, posixpath.basename(urlparse(source.url).path)))
            for source in release.sources
            if source.format in formats
        )

        self._write_metadata(dest_dir, release, parser)
        files = [self.host.download_file(url, path) for url, path in downloads]

        logger.info(f"Fetched {release.tag_name} with {len(files)} file(s)")
        return InResponse(
            version=Version(tag=release.tag_name, commit_sha=release.commit_sha),
            metadata=metadata_from_release(release),
            files=files,
        )

    def _write_metadata(self, dest_dir: Path, release: Release, parser: VersionParser) -> None:
        (dest_dir / 'tag').write_text(release.tag_name)
        (dest_dir / 'version').write_text(parser.parse(release.tag_name) or '')
        (dest_dir / 'commit_sha').write_text(release.commit_sha)
        (dest_dir / 'body').write_text(release.description)
