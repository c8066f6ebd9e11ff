"""
Domain layer for glrelease.

Contains pure domain objects with no I/O or side effects:
- Tag, Release, AssetLink: what the repository host stores
- Version, MetadataPair: what the CI orchestrator exchanges with us
- TagFilter, VersionParser: which tags carry versions and how they sort
- CheckRequest, InRequest, OutRequest: the stdin payloads
"""

from .release import (
    AssetLink,
    MetadataPair,
    ProjectFile,
    Release,
    ReleasePage,
    ReleaseSource,
    ReleaseStub,
    Tag,
    TagPage,
    Version,
    metadata_from_release,
)
from .version import (
    DEFAULT_TAG_FILTER,
    TagFilter,
    VersionParser,
    compare_versions,
    parse_version_token,
    version_key,
)
from .request import CheckRequest, InParams, InRequest, OutParams, OutRequest

__all__ = [
    'AssetLink',
    'MetadataPair',
    'ProjectFile',
    'Release',
    'ReleasePage',
    'ReleaseSource',
    'ReleaseStub',
    'Tag',
    'TagPage',
    'Version',
    'metadata_from_release',
    'DEFAULT_TAG_FILTER',
    'TagFilter',
    'VersionParser',
    'compare_versions',
    'parse_version_token',
    'version_key',
    'CheckRequest',
    'InParams',
    'InRequest',
    'OutParams',
    'OutRequest',
]
