"""
Job description formatting.

Turns pasted free text into a section-delimited form: one paragraph per
recognized section heading and one line per bullet.
"""

import re

SECTION_KEYWORDS = (
    "responsibilities",
    "requirements",
    "qualifications",
    "skills",
    "benefits",
    "about",
)

CANONICAL_BULLET = "•"

_KEYWORDS = "|".join(SECTION_KEYWORDS)

_WHITESPACE_RUN = re.compile(r"\s+")
_SECTION_WORD = re.compile(rf"\b({_KEYWORDS})\b", re.IGNORECASE)
_BULLET_GLYPH = re.compile(r"[•·▪▫◦‣⁃●○■□]")
# "-" or "*" standing on its own; a bullet glyph next to it gets spaced out later
_MARKER_BULLET = re.compile(rf"(?:^|(?<=[\s{CANONICAL_BULLET}]))[-*](?=[\s{CANONICAL_BULLET}])")
_BULLET = re.compile(rf"[ \t]*{CANONICAL_BULLET}[ \t]*")
_TRAILING_SPACE = re.compile(r"[ \t]+\n")
_EXTRA_BREAKS = re.compile(r"\n{3,}")
_SECTION_HEADING = re.compile(rf"\n\n({_KEYWORDS})\b", re.IGNORECASE)


def _title_heading(match: re.Match) -> str:
    word = match.group(1)
    return "\n\n" + word[0].upper() + word[1:].lower()


def _format_once(text: str) -> str:
    text = _WHITESPACE_RUN.sub(" ", text).strip()
    text = _SECTION_WORD.sub(lambda m: "\n\n" + m.group(1), text)
    text = _BULLET_GLYPH.sub(CANONICAL_BULLET, text)
    text = _MARKER_BULLET.sub(CANONICAL_BULLET, text)
    text = _BULLET.sub(f"\n{CANONICAL_BULLET} ", text)
    text = _TRAILING_SPACE.sub("\n", text)
    text = _EXTRA_BREAKS.sub("\n\n", text)
    text = _SECTION_HEADING.sub(_title_heading, text)
    return text.strip()


def format_job_description(description: str) -> str:
    """Normalize a raw job description.

    Normalizing already-normalized text returns it unchanged: formatting is
    repeated until a pass leaves the text as it is. Empty input gives an
    empty string.
    """
    if not description:
        return ""

    text = _format_once(description)
    previous = None
    while text != previous:
        previous, text = text, _format_once(text)
    return text
