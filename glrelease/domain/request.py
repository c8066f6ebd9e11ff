"""
Request payloads read from stdin by the check, in and out commands.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import Source
from ..exit_codes import ConfigurationError
from .release import Version


def _params(data: Dict[str, Any]) -> Dict[str, Any]:
    params = data.get('params') or {}
    if not isinstance(params, dict):
        raise ConfigurationError("'params' must be an object")
    return params


def _globs(params: Dict[str, Any]) -> List[str]:
    globs = params.get('globs') or []
    if isinstance(globs, str) or not isinstance(globs, list):
        raise ConfigurationError("params.globs must be a list of patterns")
    return [str(g) for g in globs]


def _version(data: Dict[str, Any]) -> Optional[Version]:
    version = data.get('version')
    if version is not None and not isinstance(version, dict):
        raise ConfigurationError("'version' must be an object")
    return Version.from_dict(version)


@dataclass
class CheckRequest:
    source: Source
    version: Optional[Version] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[Dict[str, Any]] = None) -> 'CheckRequest':
        return cls(source=Source.from_dict(data.get('source'), config), version=_version(data))


@dataclass
class InParams:
    """
    Attributes:
        globs: Shell patterns selecting asset links by name (empty: all)
        include_sources: Source archive formats to download
        include_source_tarball: Legacy switch for "tar.gz"
        include_source_zip: Legacy switch for "zip"
    """
    globs: List[str] = field(default_factory=list)
    include_sources: List[str] = field(default_factory=list)
    include_source_tarball: bool = False
    include_source_zip: bool = False

    def source_formats(self) -> List[str]:
        """Archive formats to fetch; the legacy switches only apply when the list is empty."""
        if self.include_sources:
            return list(self.include_sources)
        formats = []
        if self.include_source_tarball:
            formats.append('tar.gz')
        if self.include_source_zip:
            formats.append('zip')
        return formats


@dataclass
class InRequest:
    source: Source
    version: Optional[Version] = None
    params: InParams = field(default_factory=InParams)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[Dict[str, Any]] = None) -> 'InRequest':
        params = _params(data)
        include_sources = params.get('include_sources') or []
        if not isinstance(include_sources, list):
            raise ConfigurationError("params.include_sources must be a list of formats")
        return cls(
            source=Source.from_dict(data.get('source'), config),
            version=_version(data),
            params=InParams(
                globs=_globs(params),
                include_sources=[str(s) for s in include_sources],
                include_source_tarball=bool(params.get('include_source_tarball', False)),
                include_source_zip=bool(params.get('include_source_zip', False)),
            ),
        )


@dataclass
class OutParams:
    """
    File paths are relative to the build-output directory.

    Attributes:
        tag: File holding the tag name (required)
        tag_prefix: Literal prefix prepended to the tag name
        commitish: File holding the commit ref to tag
        name: File holding the release name
        body: File holding the release description
        globs: Patterns selecting the artifacts to publish
    """
    tag: str
    tag_prefix: str = ""
    commitish: Optional[str] = None
    name: Optional[str] = None
    body: Optional[str] = None
    globs: List[str] = field(default_factory=list)


@dataclass
class OutRequest:
    source: Source
    params: OutParams

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[Dict[str, Any]] = None) -> 'OutRequest':
        source = Source.from_dict(data.get('source'), config)
        params = _params(data)
        if not params.get('tag'):
            raise ConfigurationError("params.tag is required")
        return cls(
            source=source,
            params=OutParams(
                tag=str(params['tag']),
                tag_prefix=str(params.get('tag_prefix') or ''),
                commitish=params.get('commitish') or None,
                name=params.get('name') or None,
                body=params.get('body') or None,
                globs=_globs(params),
            ),
        )
