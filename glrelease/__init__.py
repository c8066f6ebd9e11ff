"""
glrelease - GitLab releases as a CI pipeline resource.

Three commands make up the resource protocol:

    check   list release versions newer than the last one seen
    in      download a release's metadata and assets into a directory
    out     create or update a release and replace its asset links

Programmatic use:
    from glrelease import CheckRequest, CheckService, GitLabClient, Source

    source = Source(repository="group/project", access_token="...")
    with GitLabClient(source) as client:
        for version in CheckService(client).run(CheckRequest(source=source)):
            print(version.tag)
"""

__version__ = "0.1.0"

from .config import Source, load_config
from .domain import (
    CheckRequest,
    InRequest,
    OutRequest,
    TagFilter,
    Version,
    VersionParser,
    compare_versions,
)
from .infra import GitLabClient, RepositoryHost
from .services import CheckService, FetchService, ReleaseCatalog, SyncService

__all__ = [
    '__version__',
    'Source',
    'load_config',
    'CheckRequest',
    'InRequest',
    'OutRequest',
    'TagFilter',
    'Version',
    'VersionParser',
    'compare_versions',
    'GitLabClient',
    'RepositoryHost',
    'CheckService',
    'FetchService',
    'ReleaseCatalog',
    'SyncService',
]
