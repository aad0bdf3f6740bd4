"""
Link reference parser.

Turns free text into an ordered, deduplicated list of document names.
Two notations are recognised:

- wiki style ``[[Note]]`` / ``[[Folder/Note]]`` (inner text trimmed, used verbatim)
- markdown style ``[label](target)`` (label dropped, target trimmed,
  internal-link prefix stripped, percent-decoded)

All wiki matches are collected before any markdown match. Matching against
the store is exact, so no case, separator or extension cleanup happens here.
"""
import re
import urllib.parse
from typing import Iterable, List

WIKI_LINK_RE = re.compile(r"\[\[(.+?)\]\]")
MD_LINK_RE = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")

# Checked in order; first match wins.
INTERNAL_LINK_PREFIXES = (
    "app://obsidian.md/",
    "obsidian://open?file=",
)

# %XX with two hex digits; anything else after '%' is malformed.
_PCT_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def strip_internal_prefix(target: str) -> str:
    for prefix in INTERNAL_LINK_PREFIXES:
        if target.startswith(prefix):
            return target[len(prefix):]
    return target


def percent_decode(value: str) -> str:
    """
    Strict percent-decoding.

    Returns ``value`` unchanged when it holds a malformed escape or the
    decoded bytes are not valid UTF-8.
    """
    if "%" not in value:
        return value
    if _PCT_ESCAPE_RE.search(value):
        return value
    try:
        return urllib.parse.unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def wiki_targets(text: str) -> List[str]:
    return [m.group(1).strip() for m in WIKI_LINK_RE.finditer(text)]


def markdown_targets(text: str) -> List[str]:
    out = []
    for m in MD_LINK_RE.finditer(text):
        target = strip_internal_prefix(m.group(2).strip())
        out.append(percent_decode(target))
    return out


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def parse(raw_text: str) -> List[str]:
    """
    Extract referenced document names from ``raw_text``.

    An empty list means "no references found"; callers must stop there.
    """
    if not raw_text:
        return []
    candidates = wiki_targets(raw_text) + markdown_targets(raw_text)
    return _dedupe(c for c in candidates if c)
