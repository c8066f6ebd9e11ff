"""
Infrastructure layer for glrelease.

Contains abstractions for external systems:
- RepositoryHost: the protocol the engines depend on
- GitLabClient: GitLab REST API v4 implementation of it

These provide clean interfaces that can be mocked for testing.
"""

from .host import RepositoryHost
from .gitlab_client import GitLabClient

__all__ = [
    'RepositoryHost',
    'GitLabClient',
]
