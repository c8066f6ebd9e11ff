"""
Tests for version tokens, their ordering and the tag filter.
"""

import random

import pytest

from glrelease.domain.version import (
    DEFAULT_TAG_FILTER,
    TagFilter,
    VersionParser,
    compare_versions,
    parse_version_token,
    version_key,
)
from glrelease.exit_codes import CONFIG_ERROR, ConfigurationError


class TestParseVersionToken:
    """Tests for parse_version_token()."""

    @pytest.mark.parametrize("token", [
        "1",
        "1.0",
        "1.0.0",
        "2.1.10",
        "1.0.0-rc1",
        "1.0.0-dev.2",
        "1.0.0+build.7",
        "1.0.0-rc1+build.7",
        "1.0.0_ora",
        "1.0.0_ora-dev1",
    ])
    def test_accepts_well_formed(self, token):
        assert parse_version_token(token) is not None

    @pytest.mark.parametrize("token", [
        "",
        "latest",
        "v1.0.0",
        "1..0",
        "1.0.",
        ".1.0",
        "1.0.0-",
        "1.0.0+",
        "1.0 .0",
    ])
    def test_rejects_malformed(self, token):
        assert parse_version_token(token) is None

    def test_version_key_raises_for_malformed(self):
        with pytest.raises(ValueError):
            version_key("nightly")


class TestCompareVersions:
    """Tests for the total order over version tokens."""

    def test_numeric_not_lexicographic(self):
        assert compare_versions("2.1.10", "2.1.9") == 1
        assert compare_versions("1.10.0", "1.9.0") == 1

    def test_missing_trailing_components_are_zero(self):
        assert compare_versions("1.0", "1.0.0") == 0
        assert compare_versions("1", "1.0.0") == 0
        assert compare_versions("1.0.1", "1.0") == 1

    def test_prerelease_before_release(self):
        assert compare_versions("1.0.0-rc1", "1.0.0") == -1
        assert compare_versions("1.0.0-dev1", "1.0.0-dev2") == -1

    def test_postrelease_after_release(self):
        assert compare_versions("1.0.0+build.1", "1.0.0") == 1
        assert compare_versions("1.0.0+build.1", "1.0.1") == -1

    def test_numeric_qualifier_components_compare_numerically(self):
        assert compare_versions("1.0.0-rc.10", "1.0.0-rc.9") == 1

    def test_shorter_qualifier_first(self):
        assert compare_versions("1.0.0-rc", "1.0.0-rc.1") == -1

    def test_reflexive(self):
        for token in ["1.0.0", "1.0.0-rc1", "1.0.0_ora", "1.0.0+b"]:
            assert compare_versions(token, token) == 0

    def test_antisymmetric(self):
        pairs = [("1.0.0", "1.0.1"), ("1.0.0-a", "1.0.0"), ("1.0.0_ora", "1.1.0")]
        for a, b in pairs:
            assert compare_versions(a, b) == -compare_versions(b, a)

    def test_mixed_components_order(self):
        expected = [
            "1.0.0-dev1",
            "1.0.0-dev2",
            "1.0.0",
            "1.0.1",
            "1.0.0_ora-dev1",
            "1.0.0_ora-dev2",
            "1.0.0_ora",
            "1.1.0",
        ]
        shuffled = list(expected)
        random.Random(7).shuffle(shuffled)
        assert sorted(shuffled, key=version_key) == expected

    def test_transitive_over_sample(self):
        tokens = ["0.9", "1.0.0-a", "1.0.0-b", "1.0", "1.0.0+x", "1.0.1", "1.0.0_z", "2"]
        keys = sorted(tokens, key=version_key)
        for i, a in enumerate(keys):
            for b in keys[i + 1:]:
                assert compare_versions(a, b) <= 0


class TestTagFilter:
    """Tests for TagFilter compilation and extraction."""

    def test_default_filter(self):
        tag_filter = TagFilter.compile()
        assert tag_filter.pattern == DEFAULT_TAG_FILTER
        assert tag_filter.extract("v1.2.0") == "1.2.0"
        assert tag_filter.extract("1.2.0") == "1.2.0"

    def test_default_filter_rejects_double_v(self):
        assert TagFilter.compile().extract("vv1.0") is None

    def test_custom_filter(self):
        tag_filter = TagFilter.compile(r"release-(\d+\.\d+\.\d+)")
        assert tag_filter.extract("release-3.2.1") == "3.2.1"
        assert tag_filter.extract("v3.2.1") is None

    def test_must_match_whole_tag(self):
        tag_filter = TagFilter.compile(r"v(\d+\.\d+)")
        assert tag_filter.extract("v1.2") == "1.2"
        assert tag_filter.extract("v1.2-hotfix") is None

    def test_invalid_regex(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TagFilter.compile(r"v(\d+")
        assert exc_info.value.exit_code == CONFIG_ERROR

    @pytest.mark.parametrize("pattern", [r"v\d+", r"(v)(\d+)"])
    def test_requires_exactly_one_group(self, pattern):
        with pytest.raises(ConfigurationError, match="exactly one capture group"):
            TagFilter.compile(pattern)

    def test_empty_pattern_means_default(self):
        assert TagFilter.compile("").pattern == DEFAULT_TAG_FILTER


class TestVersionParser:
    """Tests for VersionParser."""

    def test_parse(self):
        parser = VersionParser()
        assert parser.parse("v2.1.10") == "2.1.10"
        assert parser.parse("latest") is None
        assert parser.parse("vnext") is None

    def test_capture_must_be_a_version(self):
        parser = VersionParser.from_pattern(r"release/(.*)")
        assert parser.parse("release/1.0") == "1.0"
        assert parser.parse("release/candidate") is None

    def test_key(self):
        parser = VersionParser()
        assert parser.key("v1.0") == parser.key("v1.0.0")
        assert parser.key("v1.0.1") > parser.key("v1.0.0")
        assert parser.key("junk") is None
