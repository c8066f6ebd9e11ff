"""
Tests for the check service.

Tests cover:
- Version selection with and without a checkpoint
- Checkpoint equal to the newest version, missing, or unparseable
- Custom tag filters
- Exclusion of plain tags and unparseable tags
- Configuration errors surfacing before any host call
"""

import pytest

from glrelease.config import Source
from glrelease.domain.release import Version
from glrelease.domain.request import CheckRequest
from glrelease.domain.version import VersionParser
from glrelease.exit_codes import ConfigurationError, TransientHostError
from glrelease.services.check_service import CheckService, select_versions, sorted_candidates

from fakes import FakeHost, make_catalog, make_tag


def run_check(host, checkpoint=None, tag_filter=None, per_page=100):
    source = Source(repository="group/project", tag_filter=tag_filter)
    version = Version(tag=checkpoint) if checkpoint else None
    service = CheckService(host, per_page=per_page)
    return [v.tag for v in service.run(CheckRequest(source=source, version=version))]


# ──────────────────────────────────────────────
# Catalog scenarios
# ──────────────────────────────────────────────

class TestCheckCatalog:
    """The seven-version catalog from the conftest fixture."""

    def test_no_checkpoint_returns_newest(self, catalog_host):
        assert run_check(catalog_host) == ["v5.1.0"]

    def test_missing_checkpoint_between_versions(self, catalog_host):
        assert run_check(catalog_host, "v2.5.0") == ["v2.5.1", "v5.0.0", "v5.1.0"]

    def test_checkpoint_older_than_everything(self, catalog_host):
        assert run_check(catalog_host, "v0.0.1") == [
            "v1.0.0", "v1.0.1", "v1.1.0", "v2.1.10", "v2.5.1", "v5.0.0", "v5.1.0",
        ]

    def test_checkpoint_is_newest(self, catalog_host):
        assert run_check(catalog_host, "v5.1.0") == ["v5.1.0"]

    def test_checkpoint_present(self, catalog_host):
        assert run_check(catalog_host, "v2.5.1") == ["v2.5.1", "v5.0.0", "v5.1.0"]

    def test_custom_filter_minor_one(self, catalog_host):
        result = run_check(catalog_host, "v0.1.0", tag_filter=r"^v(\d+\.1\.\d+)$")
        assert result == ["v1.1.0", "v2.1.10", "v5.1.0"]

    def test_unparseable_checkpoint_restarts_from_newest(self, catalog_host):
        assert run_check(catalog_host, "nightly") == ["v5.1.0"]

    def test_checkpoint_newer_than_everything_restarts(self, catalog_host):
        assert run_check(catalog_host, "v9.0.0") == ["v5.1.0"]

    def test_versions_carry_commit_sha(self, catalog_host):
        service = CheckService(catalog_host)
        source = Source(repository="group/project")
        versions = service.run(CheckRequest(source=source))
        assert versions == [Version(tag="v5.1.0", commit_sha="sha-v5.1.0")]

    def test_result_is_strictly_ascending(self, catalog_host):
        parser = VersionParser()
        tags = run_check(catalog_host, "v0.0.1")
        keys = [parser.key(tag) for tag in tags]
        assert all(a < b for a, b in zip(keys, keys[1:]))


# ──────────────────────────────────────────────
# Filtering
# ──────────────────────────────────────────────

class TestCheckFiltering:

    def test_empty_catalog(self):
        assert run_check(FakeHost()) == []
        assert run_check(FakeHost(), "v1.0.0") == []

    def test_plain_tags_are_not_versions(self):
        host = FakeHost(tags=[
            make_tag("v2.0.0", date="2024-03-01T00:00:00Z", release=False),
            make_tag("v1.0.0", date="2024-02-01T00:00:00Z"),
        ])
        assert run_check(host) == ["v1.0.0"]

    def test_unparseable_tags_are_dropped(self):
        host = FakeHost(tags=make_catalog(["latest", "v1.1.0", "nightly-2024", "v1.0.0"]))
        assert run_check(host, "v1.0.0") == ["v1.0.0", "v1.1.0"]

    def test_ordering_ignores_host_order(self):
        host = FakeHost(tags=make_catalog(["v1.0.0", "v1.10.0", "v1.2.0"]))
        assert run_check(host, "v0.9.0") == ["v1.0.0", "v1.2.0", "v1.10.0"]

    def test_checkpoint_excluded_by_filter_restarts(self, catalog_host):
        result = run_check(catalog_host, "v2.5.1", tag_filter=r"^v(\d+\.1\.\d+)$")
        assert result == ["v5.1.0"]

    def test_checkpoint_without_release_restarts_from_newest(self):
        host = FakeHost(tags=[
            make_tag("v2.0.0", date="2024-03-01T00:00:00Z", release=False),
            make_tag("v1.0.0", date="2024-02-01T00:00:00Z"),
        ])
        assert run_check(host, "v2.0.0") == ["v1.0.0"]
        assert host.count('list_tags') == 2

    def test_filtered_out_checkpoint_listed_first_restarts(self):
        host = FakeHost(tags=[
            make_tag("v2.5.1", date="2024-03-01T00:00:00Z"),
            make_tag("v5.1.0", date="2024-02-01T00:00:00Z"),
        ])
        result = run_check(host, "v2.5.1", tag_filter=r"^v(\d+\.1\.\d+)$")
        assert result == ["v5.1.0"]

    def test_found_checkpoint_needs_no_second_listing(self, catalog_host):
        run_check(catalog_host, "v5.0.0")
        assert catalog_host.count('list_tags') == 1


# ──────────────────────────────────────────────
# Failures
# ──────────────────────────────────────────────

class TestCheckFailures:

    def test_invalid_filter_before_host_call(self, catalog_host):
        with pytest.raises(ConfigurationError):
            run_check(catalog_host, tag_filter=r"v(\d+")
        assert catalog_host.calls == []

    def test_filter_without_group_before_host_call(self, catalog_host):
        with pytest.raises(ConfigurationError):
            run_check(catalog_host, tag_filter=r"v\d+")
        assert catalog_host.calls == []

    def test_listing_failure_is_not_retried(self, catalog_host):
        catalog_host.list_failures = 1
        with pytest.raises(TransientHostError):
            run_check(catalog_host)
        assert catalog_host.count('list_tags') == 1


class TestSelectVersions:
    """Direct tests for select_versions()."""

    def test_equivalent_versions_sorted_by_name(self):
        parser = VersionParser()
        candidates = sorted_candidates(make_catalog(["v1.0.0", "v1.0"]), parser)
        assert [c.name for c in candidates] == ["v1.0", "v1.0.0"]

    def test_no_candidates(self):
        assert select_versions([], Version(tag="v1"), VersionParser()) == []
