"""
Repository host contract.

The check, in and out engines only talk to the host through this protocol,
so tests can hand them an in-memory implementation.
"""

from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from ..domain.release import AssetLink, ProjectFile, Release, ReleasePage, Tag, TagPage


@runtime_checkable
class RepositoryHost(Protocol):
    """
    Operations glrelease needs from a hosted Git platform.

    Listings are paginated; get_* raise NotFoundError when the object does
    not exist and HostError (or a subclass) for any other failure.
    """

    def list_tags(self, page: int = 1, per_page: int = 100) -> TagPage:
        """One page of tags, most recently updated first."""
        ...

    def list_releases(self, page: int = 1, per_page: int = 100) -> ReleasePage:
        """One page of releases, most recently released first."""
        ...

    def get_tag(self, name: str) -> Tag:
        ...

    def get_release(self, tag_name: str) -> Release:
        ...

    def create_tag(self, name: str, ref: str) -> Tag:
        ...

    def create_release(self, tag_name: str, name: str, description: Optional[str] = None) -> Release:
        """Create a release; raises ConflictError if the tag already has one."""
        ...

    def update_release(self, tag_name: str, name: str, description: Optional[str] = None) -> Release:
        """Update a release; a None description leaves the current one untouched."""
        ...

    def list_release_links(self, tag_name: str) -> List[AssetLink]:
        ...

    def create_release_link(self, tag_name: str, name: str, url: str) -> AssetLink:
        ...

    def delete_release_link(self, tag_name: str, link_id: int) -> None:
        ...

    def upload_file(self, path: Path) -> ProjectFile:
        """Upload a local file to the project's file store."""
        ...

    def download_file(self, url: str, dest: Path) -> Path:
        """Download a file referenced by a release link or source archive."""
        ...
