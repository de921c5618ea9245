"""Slug helpers for filesystem-safe segment audio names."""

from __future__ import annotations

import re
import unicodedata

_PART_SUFFIX_RE = re.compile(r"\s*\(part\s+(\d+)\)\s*$", re.IGNORECASE)


def slugify_segment_title(value: str, max_length: int = 48) -> str:
    """Return an ASCII slug for a segment title, keeping any part number.

    `"Results (Part 2)"` becomes `"results-part-2"`; titles without ASCII
    letters or digits fall back to `"segment"`.
    """

    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    part_match = _PART_SUFFIX_RE.search(ascii_only)
    base = _PART_SUFFIX_RE.sub("", ascii_only) if part_match else ascii_only
    slug = re.sub(r"[^a-z0-9]+", "-", base.lower()).strip("-")[:max_length].strip("-")
    if part_match:
        slug = f"{slug}-part-{part_match.group(1)}" if slug else f"part-{part_match.group(1)}"
    return slug or "segment"
