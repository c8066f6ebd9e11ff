"""
Check service for glrelease.

Answers the orchestrator's question "which versions are new since the last
one you told me about?".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..domain.release import Tag, Version
from ..domain.request import CheckRequest
from ..domain.version import TagFilter, VersionKey, VersionParser
from ..infra.host import RepositoryHost
from .catalog import DEFAULT_PAGE_SIZE, ReleaseCatalog

logger = logging.getLogger(__name__)


class CheckState(Enum):
    """Whether the orchestrator supplied a checkpoint."""
    NO_CHECKPOINT = "no_checkpoint"
    HAS_CHECKPOINT = "has_checkpoint"


@dataclass(frozen=True)
class Candidate:
    """A version-bearing tag with its sort key."""
    tag: Tag
    key: VersionKey

    @property
    def name(self) -> str:
        return self.tag.name


def sorted_candidates(tags: List[Tag], parser: VersionParser) -> List[Candidate]:
    """
    Keep the version-bearing tags and sort them oldest first.

    Tags whose name does not parse are dropped. Equivalent versions
    ("1.0" and "1.0.0") are ordered by tag name so the result is stable.
    """
    candidates = []
    for tag in tags:
        key = parser.key(tag.name)
        if key is None:
            logger.debug(f"Ignoring tag {tag.name}: not a version")
            continue
        candidates.append(Candidate(tag=tag, key=key))
    candidates.sort(key=lambda c: (c.key, c.name))
    return candidates


def select_versions(candidates: List[Candidate], checkpoint: Optional[Version],
                    parser: VersionParser) -> List[Version]:
    """
    Pick what to report from the sorted candidates.

    - nothing available: []
    - no checkpoint: the newest version only
    - checkpoint is the newest: the newest only (re-affirm, never empty)
    - checkpoint present: the checkpoint and everything after it
    - checkpoint gone but parseable: every version at or above it
    - checkpoint gone and unparseable: the newest only (start over)
    """
    if not candidates:
        return []

    newest = candidates[-1]
    state = CheckState.NO_CHECKPOINT if checkpoint is None else CheckState.HAS_CHECKPOINT
    if state is CheckState.NO_CHECKPOINT or newest.name == checkpoint.tag:
        return [Version.from_tag(newest.tag)]

    for index, candidate in enumerate(candidates):
        if candidate.name == checkpoint.tag:
            return [Version.from_tag(c.tag) for c in candidates[index:]]

    checkpoint_key = parser.key(checkpoint.tag)
    if checkpoint_key is not None:
        newer = [c for c in candidates if c.key >= checkpoint_key]
        if newer:
            logger.info(f"Version {checkpoint.tag} no longer exists, reporting {len(newer)} newer versions")
            return [Version.from_tag(c.tag) for c in newer]

    logger.info(f"Version {checkpoint.tag} not found, restarting from {newest.name}")
    return [Version.from_tag(newest.tag)]


class CheckService:
    """
    Computes the ordered list of new versions since a checkpoint.

    Example:
        service = CheckService(client)
        versions = service.run(CheckRequest(source=source, version=Version("v1.0.0")))
    """

    def __init__(self, host: RepositoryHost, per_page: int = DEFAULT_PAGE_SIZE):
        self.host = host
        self.catalog = ReleaseCatalog(host, per_page=per_page)

    def run(self, request: CheckRequest) -> List[Version]:
        """
        Run a check.

        Raises:
            ConfigurationError: invalid tag_filter (before any host call)
            HostError: the catalog could not be retrieved
        """
        parser = VersionParser(TagFilter.compile(request.source.tag_filter))
        checkpoint = request.version

        if checkpoint is None:
            tags = self.catalog.list_all()
        else:
            tags = self.catalog.list_until(checkpoint.tag)

        candidates = sorted_candidates(ReleaseCatalog.with_releases(tags), parser)

        # The listing was cut at a checkpoint that is not a candidate, so
        # older releases are missing from it
        if checkpoint is not None and self._cut_at_non_candidate(tags, candidates, checkpoint.tag):
            logger.debug(f"Version {checkpoint.tag} is not a release under the filter, listing all tags")
            tags = self.catalog.list_all()
            candidates = sorted_candidates(ReleaseCatalog.with_releases(tags), parser)

        versions = select_versions(candidates, checkpoint, parser)
        logger.info(f"Found {len(versions)} version(s) in {len(candidates)} release(s)")
        return versions

    @staticmethod
    def _cut_at_non_candidate(tags: List[Tag], candidates: List[Candidate], marker: str) -> bool:
        listed = any(tag.name == marker for tag in tags)
        return listed and not any(c.name == marker for c in candidates)
