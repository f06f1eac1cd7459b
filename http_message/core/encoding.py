"""Percent-encoding of URI components (RFC 3986)."""

import re
from urllib.parse import quote

# Each pattern matches a maximal run of characters outside the component's
# allowed set, or a "%" that does not start a valid escape.
USER_INFO_PATTERN = re.compile(r"(?:[^a-zA-Z0-9_\-.~!$&'()*+,;=%]+|%(?![A-Fa-f0-9]{2}))")
PATH_PATTERN = re.compile(r"(?:[^a-zA-Z0-9_\-.~:@&=+$,/;%]+|%(?![A-Fa-f0-9]{2}))")
QUERY_PATTERN = re.compile(r"(?:[^a-zA-Z0-9_\-.~!$&'()*+,;=%:@/?]+|%(?![A-Fa-f0-9]{2}))")
FRAGMENT_PATTERN = QUERY_PATTERN

# Whitespace and C0 controls, which urlsplit would otherwise drop or strip.
CONTROL_PATTERN = re.compile(r"[\x00-\x20]+")


def _quote(match: re.Match[str]) -> str:
    return quote(match.group(0), safe="")


def encode(value: str, pattern: re.Pattern[str]) -> str:
    """Percent-encode every run of `value` matched by `pattern`.

    Valid ``%XX`` escapes are left untouched, so encoding an already
    encoded value returns it unchanged.
    """
    return pattern.sub(_quote, value)
