"""
Shared fixtures for glrelease tests.
"""

import os

import pytest

from fakes import FakeHost, make_catalog


CATALOG = ["v5.1.0", "v5.0.0", "v2.5.1", "v2.1.10", "v1.1.0", "v1.0.1", "v1.0.0"]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's GitLab settings out of the tests."""
    for key in list(os.environ):
        if key.startswith('GLRELEASE_') or key == 'GITLAB_TOKEN':
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def catalog_host():
    """Host holding seven released versions, most recently updated first."""
    return FakeHost(tags=make_catalog(CATALOG))


@pytest.fixture
def build_dir(tmp_path):
    """A build-output directory with a tag file and two artifacts."""
    build = tmp_path / 'build'
    (build / 'dist').mkdir(parents=True)
    (build / 'version').write_text('1.2.0\n')
    (build / 'commit').write_text('abc123\n')
    (build / 'name').write_text('Release 1.2.0\n')
    (build / 'notes.md').write_text('## Changes\n\n- fixed things\n')
    (build / 'dist' / 'app-linux.tar.gz').write_bytes(b'linux build')
    (build / 'dist' / 'app-darwin.tar.gz').write_bytes(b'darwin build')
    return build
