"""
Release catalog for glrelease.

Walks the host's paginated tag listing (most recently updated first).
"""

import logging
from typing import Iterable, Iterator, List

from ..domain.release import Tag
from ..infra.host import RepositoryHost

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class ReleaseCatalog:
    """
    Paginated tag retrieval with a "stop at a known tag" shortcut.

    Example:
        catalog = ReleaseCatalog(client)
        tags = catalog.list_until("v1.4.0")
        releases = ReleaseCatalog.with_releases(tags)
    """

    def __init__(self, host: RepositoryHost, per_page: int = DEFAULT_PAGE_SIZE):
        self.host = host
        self.per_page = per_page

    def pages(self) -> Iterator[List[Tag]]:
        """Yield the tag listing one page at a time."""
        page = 1
        while page is not None:
            logger.debug(f"Fetching tags page {page}")
            result = self.host.list_tags(page=page, per_page=self.per_page)
            yield result.tags
            page = result.next_page

    def list_all(self) -> List[Tag]:
        """Every tag of every page, concatenated in host order."""
        tags = [tag for page in self.pages() for tag in page]
        logger.debug(f"Catalog holds {len(tags)} tags")
        return tags

    def list_until(self, marker: str) -> List[Tag]:
        """
        Tags up to and including `marker`, plus the ones tied with it.

        The host orders tags by commit date, and tags sharing the marker's
        date come back in no particular order, so every tag that follows the
        marker with the same date is kept too, across page boundaries.
        When the marker is never seen the full catalog is returned.

        Args:
            marker: Name of the last tag already known to the caller

        Returns:
            Tags in host order
        """
        collected: List[Tag] = []
        found = None

        for page in self.pages():
            for tag in page:
                if found is None:
                    collected.append(tag)
                    if tag.name == marker:
                        found = tag
                elif found.committed_date is not None and tag.committed_date == found.committed_date:
                    collected.append(tag)
                else:
                    logger.debug(f"Stopped listing after {marker} ({len(collected)} tags)")
                    return collected

        if found is None:
            logger.debug(f"Marker {marker} not found, using full catalog")
        return collected

    @staticmethod
    def with_releases(tags: Iterable[Tag]) -> List[Tag]:
        """Drop plain tags: only tags carrying release metadata are candidates."""
        return [tag for tag in tags if tag.has_release]
