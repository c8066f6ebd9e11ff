"""
Service layer for glrelease.

Contains the logic behind each command, written against the RepositoryHost
protocol:
- ReleaseCatalog: paginated tag listing
- CheckService: new versions since a checkpoint
- FetchService: download one release
- SyncService: publish a release and its assets

Services are the primary API for commands to use.
"""

from .catalog import ReleaseCatalog
from .check_service import CheckService
from .fetch_service import FetchService
from .sync_service import SyncService

__all__ = [
    'ReleaseCatalog',
    'CheckService',
    'FetchService',
    'SyncService',
]
