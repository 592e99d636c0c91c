"""Running-text layout rules shared by the render sinks."""

from __future__ import annotations

import re

# Tokens printed without a leading space.
ATTACHED_PUNCTUATION = {
    ".", ",", ";", ">", "]", ")",
    "\u00B7", "\u0387",          # middle dot, ano teleia
    "\u037E",                    # greek question mark
    ",\"", ".\"", ".\u201D", ".\u2019",
    "\u00B7\"", "\u0387\"",
}

# Tokens after which the next token is printed without a leading space.
OPENING_BRACKETS = {"<", "[", "("}

SECTION_RE = re.compile(r"([0-9]+)[.]([0-9]+)")


def needs_space(token: str, after_opening: bool) -> bool:
    return not (after_opening or token in ATTACHED_PUNCTUATION)


def verse_number_label(raw: str) -> str:
    """Numeric line numbers are shown on every fifth line only; others as-is."""
    raw = raw.replace("[line]", "")
    try:
        n = int(raw.strip())
    except ValueError:
        return raw
    return raw if n % 5 == 0 else ""


def parse_section(raw: str) -> tuple[str, str | None]:
    """'[section]12.3' -> ('12', '3'); a marker without N.M -> (text, None)."""
    raw = raw.replace("[section]", "")
    m = SECTION_RE.search(raw)
    if m is None:
        return raw, None
    return m.group(1), m.group(2)
