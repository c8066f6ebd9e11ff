"""
Version tokens for glrelease.

A tag is "version-bearing" when the TagFilter matches the whole tag name and
the single captured group is a well-formed version token:

    core[-pre][+post]

    core  dot-separated components, the first one numeric ("1.0.0", "2.1.10",
          "1.0.0_ora")
    pre   pre-release qualifier, sorts before the bare core ("1.0.0-rc1")
    post  post-release / build qualifier, sorts after it ("1.0.0+build.7")

Ordering (compare_versions / version_key):

    1. core components left to right, missing trailing components count as 0;
       numeric components compare numerically and sort before alphanumeric
       ones, which compare lexicographically
    2. a pre-release sorts before the bare core, a post-release after it
    3. qualifiers of the same kind compare component-wise with the same rules;
       a qualifier that is a prefix of a longer one sorts first

The order is total over tokens accepted by parse_version_token, so tags can
never end up in an arbitrary position: unparseable tags are rejected up front.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..exit_codes import ConfigurationError

DEFAULT_TAG_FILTER = r"^v?([^v].*)"

VERSION_PATTERN = re.compile(
    r"^(?P<core>[0-9]+(?:\.[0-9A-Za-z_]+)*)"
    r"(?:-(?P<pre>[0-9A-Za-z_-]+(?:\.[0-9A-Za-z_-]+)*))?"
    r"(?:\+(?P<post>[0-9A-Za-z_-]+(?:\.[0-9A-Za-z_-]+)*))?$"
)

Component = Tuple[int, int, str]
VersionKey = Tuple[Tuple[Component, ...], int, Tuple[Component, ...], int, Tuple[Component, ...]]

_NUMERIC = 0
_ALPHA = 1


def _component(text: str) -> Component:
    if text.isdigit():
        return (_NUMERIC, int(text), '')
    return (_ALPHA, 0, text)


def _components(text: Optional[str]) -> Tuple[Component, ...]:
    if not text:
        return ()
    return tuple(_component(part) for part in text.split('.'))


def parse_version_token(token: str) -> Optional[VersionKey]:
    """
    Parse a version token into its sort key.

    Args:
        token: Candidate version string (e.g. "1.2.3-rc1")

    Returns:
        Sort key, or None if the token is not a well-formed version
    """
    match = VERSION_PATTERN.match(token)
    if not match:
        return None

    core = list(_components(match.group('core')))
    while len(core) > 1 and core[-1] == (_NUMERIC, 0, ''):
        core.pop()

    pre = match.group('pre')
    post = match.group('post')
    return (
        tuple(core),
        0 if pre else 1,
        _components(pre),
        1 if post else 0,
        _components(post),
    )


def version_key(token: str) -> VersionKey:
    """Sort key for a version token; raises ValueError for malformed tokens."""
    key = parse_version_token(token)
    if key is None:
        raise ValueError(f"not a version: {token!r}")
    return key


def compare_versions(a: str, b: str) -> int:
    """
    Compare two version tokens.

    Returns:
        -1 if a < b, 0 if they are equivalent, 1 if a > b
    """
    key_a = version_key(a)
    key_b = version_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


@dataclass(frozen=True)
class TagFilter:
    """
    Compiled tag filter: a regular expression with exactly one capture group.

    Examples:
        TagFilter.compile().extract("v1.2.0")          -> "1.2.0"
        TagFilter.compile(r"^release-(.*)$").extract("release-3")  -> "3"
    """

    pattern: str
    regex: re.Pattern

    @classmethod
    def compile(cls, pattern: Optional[str] = None) -> 'TagFilter':
        """
        Compile a user supplied filter, or the default one when empty.

        Raises:
            ConfigurationError: if the pattern is invalid or does not have
                exactly one capture group
        """
        pattern = pattern or DEFAULT_TAG_FILTER
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"invalid tag_filter {pattern!r}: {e}") from e

        if regex.groups != 1:
            raise ConfigurationError(
                f"tag_filter {pattern!r} must have exactly one capture group, "
                f"found {regex.groups}"
            )
        return cls(pattern=pattern, regex=regex)

    def extract(self, tag_name: str) -> Optional[str]:
        """Return the captured substring if the whole tag name matches."""
        match = self.regex.fullmatch(tag_name)
        if not match:
            return None
        return match.group(1)


class VersionParser:
    """Turns tag names into version tokens through a TagFilter."""

    def __init__(self, tag_filter: Optional[TagFilter] = None):
        self.tag_filter = tag_filter or TagFilter.compile()

    @classmethod
    def from_pattern(cls, pattern: Optional[str]) -> 'VersionParser':
        return cls(TagFilter.compile(pattern))

    def parse(self, tag_name: str) -> Optional[str]:
        """
        Extract the version token of a tag.

        Returns:
            The captured token, or None when the filter does not match or the
            capture is not a well-formed version
        """
        token = self.tag_filter.extract(tag_name)
        if token is None or parse_version_token(token) is None:
            return None
        return token

    def key(self, tag_name: str) -> Optional[VersionKey]:
        """Sort key of a tag, or None if the tag is not version-bearing."""
        token = self.parse(tag_name)
        if token is None:
            return None
        return version_key(token)
