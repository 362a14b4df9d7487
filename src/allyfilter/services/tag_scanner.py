"""Tag-level scanning and replacement of img/a elements in raw HTML.

Matching works on the markup text with regular expressions rather than a
parsed document, so malformed fragments pass through untouched and every
byte outside a replaced element is preserved.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field

# Class attribute carried by every wrapper emitted around a decorated element
WRAPPER_CLASS = "filter-ally-wrapper"

_ATTR_VALUE = r"""(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<uq>[^\s"'>]+))"""

_IMG_PATTERN = re.compile(r"<img\b[^>]*?\ssrc\s*=\s*" + _ATTR_VALUE, re.IGNORECASE)
_ANCHOR_PATTERN = re.compile(r"<a\b[^>]*?\shref\s*=\s*" + _ATTR_VALUE, re.IGNORECASE)

# An element is already wrapped when the markup right before it opens a wrapper
_WRAPPER_OPENING = re.compile(r"""<(?:span|div)\s+class=["']""" + WRAPPER_CLASS + r"""[^"']*["']\s*>\s*\Z""")

_WRAPPED_LOOKBEHIND = 200


@dataclass
class ScanResult:
    """Distinct candidate URLs, in order of first appearance."""

    images: list[str] = field(default_factory=list)
    anchors: list[str] = field(default_factory=list)


def _distinct_values(pattern: re.Pattern[str], html: str) -> list[str]:
    seen: dict[str, None] = {}
    for match in pattern.finditer(html):
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("uq")
        if value:
            seen.setdefault(value, None)
    return list(seen)


def scan_tags(html: str) -> ScanResult:
    """Collect the distinct src values of img tags and href values of a tags."""
    return ScanResult(
        images=_distinct_values(_IMG_PATTERN, html),
        anchors=_distinct_values(_ANCHOR_PATTERN, html),
    )


def _occurrence_pattern(tag: str, attribute: str, value: str) -> re.Pattern[str]:
    """Build the pattern matching one tag instance carrying exactly this value."""
    escaped = re.escape(value)
    attr_value = rf"""(?:"{escaped}"|'{escaped}'|{escaped}(?=\s|/?>))"""
    start_tag = rf"<{tag}\b[^>]*?\s{attribute}\s*=\s*{attr_value}[^>]*>"
    if tag == "a":
        # Content may not open another anchor, so an unclosed anchor stays unmatched
        return re.compile(start_tag + r"(?:(?!<a\b).)*?</a\s*>", re.IGNORECASE | re.DOTALL)
    return re.compile(start_tag, re.IGNORECASE)


def is_wrapped(html: str, position: int) -> bool:
    """Check if the element starting at position sits directly inside a wrapper."""
    before = html[max(0, position - _WRAPPED_LOOKBEHIND) : position]
    return _WRAPPER_OPENING.search(before) is not None


def replace_tag_occurrence(
    html: str,
    tag: str,
    attribute: str,
    value: str,
    render: Callable[[str], str],
) -> tuple[str, int]:
    """
    Replace every unwrapped occurrence of a tag carrying an attribute value.

    Args:
        html: Markup to rewrite
        tag: "img" (start tag only) or "a" (start tag through </a>)
        attribute: "src" or "href"
        value: Exact raw attribute value; regex metacharacters are escaped
        render: Produces the replacement from the matched element markup

    Returns:
        Tuple of (rewritten markup, number of replaced occurrences)
    """
    pattern = _occurrence_pattern(tag, attribute, value)
    count = 0

    def replacer(match: re.Match[str]) -> str:
        nonlocal count
        if is_wrapped(html, match.start()):
            return match.group(0)
        count += 1
        return render(match.group(0))

    return pattern.sub(replacer, html), count
