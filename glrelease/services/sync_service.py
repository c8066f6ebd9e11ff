"""
Sync service for glrelease.

Publishes a release from a build-output directory:
1. Tag: reuse it, or create it at the given commit
2. Release: create it, or update its name (and body, when one is given)
3. Asset links: list, delete all, then upload and link every local file

Local inputs (tag file, globs) are resolved before the host is contacted, so
a typo in a pattern never leaves a half-published release behind.
"""

import glob
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..domain.release import AssetLink, MetadataPair, Release, Tag, Version, metadata_from_release
from ..domain.request import OutParams, OutRequest
from ..exit_codes import (
    ConfigurationError,
    ConflictError,
    GlobMismatchError,
    NotFoundError,
    TransientHostError,
)
from ..infra.host import RepositoryHost

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0


def read_input_file(source_dir: Path, relative: Optional[str], required: bool = False) -> Optional[str]:
    """
    Read a parameter file from the build-output directory, stripped.

    Returns:
        File contents, or None when no path was configured

    Raises:
        ConfigurationError: if a required path is not configured, or a
            configured file is missing or unreadable
    """
    if not relative:
        if required:
            raise ConfigurationError("missing required input file")
        return None

    path = Path(source_dir) / relative
    try:
        return path.read_text().strip()
    except FileNotFoundError as e:
        raise ConfigurationError(f"missing input file: {relative}") from e
    except OSError as e:
        raise ConfigurationError(f"could not read {relative}: {e}") from e


def resolve_globs(source_dir: Path, patterns: List[str]) -> List[Path]:
    """
    Expand artifact patterns against the build-output directory.

    Returns:
        Matching files in pattern order, each file once

    Raises:
        GlobMismatchError: a pattern matches no file
        ConfigurationError: two matched files share a base name (asset links
            are named after it)
    """
    files: List[Path] = []
    seen_paths = set()
    seen_names: Dict[str, Path] = {}

    for pattern in patterns:
        matches = sorted(
            Path(p) for p in glob.glob(os.path.join(str(source_dir), pattern))
            if os.path.isfile(p)
        )
        if not matches:
            raise GlobMismatchError(pattern)

        for path in matches:
            resolved = path.resolve()
            if resolved in seen_paths:
                continue
            if path.name in seen_names:
                raise ConfigurationError(
                    f"{path} and {seen_names[path.name]} would both be published as {path.name}"
                )
            seen_paths.add(resolved)
            seen_names[path.name] = path
            files.append(path)

    return files


@dataclass
class SyncPlan:
    """Everything read from the build-output directory, before any host call."""
    tag: str
    commitish: Optional[str] = None
    name: Optional[str] = None
    body: Optional[str] = None
    files: List[Path] = field(default_factory=list)

    @property
    def release_name(self) -> str:
        return self.name or self.tag

    @classmethod
    def from_params(cls, source_dir: Path, params: OutParams) -> 'SyncPlan':
        tag = read_input_file(source_dir, params.tag, required=True)
        if not tag:
            raise ConfigurationError(f"tag file {params.tag} is empty")

        return cls(
            tag=params.tag_prefix + tag,
            commitish=read_input_file(source_dir, params.commitish) or None,
            name=read_input_file(source_dir, params.name) or None,
            body=read_input_file(source_dir, params.body),
            files=resolve_globs(source_dir, params.globs),
        )


@dataclass
class OutResponse:
    version: Version
    metadata: List[MetadataPair] = field(default_factory=list)
    links: List[AssetLink] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version.to_dict(),
            'metadata': [pair.to_dict() for pair in self.metadata],
        }


class ReplacePhase(Enum):
    """Steps of the asset link replacement."""
    LIST = "list"
    CLEAR = "clear"
    PUBLISH = "publish"
    DONE = "done"


class AssetReplacement:
    """
    Replaces every link of a release with links to freshly uploaded files.

    LIST -> CLEAR -> PUBLISH -> DONE. Each phase only depends on what the
    host reports, so a run interrupted anywhere can start over from LIST:
    leftover links from the old set or a partial new set are all cleared.

    A single file's upload+link is retried on TransientHostError. Before a
    retry the links are listed again and any link carrying that file's name
    is deleted, so a link created by a failed attempt is never duplicated.
    """

    def __init__(
        self,
        host: RepositoryHost,
        tag_name: str,
        files: List[Path],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.host = host
        self.tag_name = tag_name
        self.files = list(files)
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep = sleep

        self.phase = ReplacePhase.LIST
        self.existing: List[AssetLink] = []
        self.published: List[AssetLink] = []

    def run(self) -> List[AssetLink]:
        while self.phase is not ReplacePhase.DONE:
            if self.phase is ReplacePhase.LIST:
                self.existing = self.host.list_release_links(self.tag_name)
                self.phase = ReplacePhase.CLEAR
            elif self.phase is ReplacePhase.CLEAR:
                for link in self.existing:
                    logger.info(f"Deleting link {link.name}")
                    self.host.delete_release_link(self.tag_name, link.id)
                self.existing = []
                self.phase = ReplacePhase.PUBLISH
            elif self.phase is ReplacePhase.PUBLISH:
                self.published = [self._publish(path) for path in self.files]
                self.phase = ReplacePhase.DONE
        return self.published

    def _delay(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    def _discard_partial(self, name: str) -> None:
        for link in self.host.list_release_links(self.tag_name):
            if link.name == name:
                logger.info(f"Deleting leftover link {link.name} from failed attempt")
                self.host.delete_release_link(self.tag_name, link.id)

    def _publish(self, path: Path) -> AssetLink:
        last_error: Optional[TransientHostError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                if attempt > 1:
                    self._discard_partial(path.name)
                logger.info(f"Uploading {path.name}")
                uploaded = self.host.upload_file(path)
                return self.host.create_release_link(self.tag_name, path.name, uploaded.url)
            except TransientHostError as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                delay = self._delay(attempt)
                logger.warning(
                    f"Uploading {path.name} failed (attempt {attempt}/{self.max_attempts}): {e}; "
                    f"retrying in {delay:g}s"
                )
                self.sleep(delay)

        raise TransientHostError(
            f"uploading {path.name} failed after {self.max_attempts} attempts: {last_error}",
            status=last_error.status if last_error else None,
        )


class SyncService:
    """
    Creates or updates a release and its asset links from local build output.

    Example:
        service = SyncService(client)
        response = service.run(Path("/tmp/build/put"), request)
        print(response.to_dict())
    """

    def __init__(
        self,
        host: RepositoryHost,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.host = host
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep = sleep

    @classmethod
    def from_config(cls, host: RepositoryHost, config: Dict[str, Any]) -> 'SyncService':
        upload = config.get('upload', {})
        return cls(
            host,
            max_attempts=int(upload.get('max_attempts', DEFAULT_MAX_ATTEMPTS)),
            base_delay=float(upload.get('base_delay_seconds', DEFAULT_BASE_DELAY)),
            max_delay=float(upload.get('max_delay_seconds', DEFAULT_MAX_DELAY)),
        )

    def run(self, source_dir: Path, request: OutRequest) -> OutResponse:
        """
        Publish the release described by the request.

        Raises:
            ConfigurationError: missing tag file, or unknown tag without commitish
            GlobMismatchError: a pattern matches no file
            TransientHostError: an upload kept failing past the retry ceiling
            HostError: any other host failure
        """
        plan = SyncPlan.from_params(Path(source_dir), request.params)
        logger.info(f"Publishing {plan.tag} with {len(plan.files)} file(s)")

        tag = self._resolve_tag(plan)
        release = self._resolve_release(plan)

        links = AssetReplacement(
            self.host,
            plan.tag,
            plan.files,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            sleep=self.sleep,
        ).run()

        return OutResponse(
            version=Version(tag=plan.tag),
            metadata=metadata_from_release(release, commit_sha=tag.commit_sha),
            links=links,
        )

    def _resolve_tag(self, plan: SyncPlan) -> Tag:
        try:
            return self.host.get_tag(plan.tag)
        except NotFoundError:
            if not plan.commitish:
                raise ConfigurationError(
                    f"tag {plan.tag} does not exist and no commitish was provided"
                ) from None

        logger.info(f"Creating tag {plan.tag} at {plan.commitish}")
        return self.host.create_tag(plan.tag, plan.commitish)

    def _resolve_release(self, plan: SyncPlan) -> Release:
        try:
            self.host.get_release(plan.tag)
        except NotFoundError:
            logger.info(f"Creating release {plan.release_name}")
            try:
                return self.host.create_release(plan.tag, plan.release_name, plan.body)
            except ConflictError:
                logger.info(f"Release {plan.tag} was created concurrently, updating it")

        logger.info(f"Updating release {plan.release_name}")
        return self.host.update_release(plan.tag, plan.release_name, plan.body)
