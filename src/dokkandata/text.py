"""String cleaning for wiki skill text and card headers."""

import re

from dokkandata.models import ERROR

_BASIC_EFFECT = re.compile(r"Basic effect\(s\)-?\s*")
_NEWLINE = re.compile(r"\r?\n")
# Dash runs ("-", "--") count as one separator
_DASH_CLAUSE = re.compile(r"\s+-+\s+")
_DASH_BULLET = re.compile(r"-+\s+")
_WHITESPACE = re.compile(r"\s+")
_SEMICOLONS = re.compile(r"\s*;[\s;]*")
_EDGE_SEPARATORS = re.compile(r"^[;\s]+|[;\s]+$")

_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_LEADING_BOLD = re.compile(r"^\s*<b>", re.IGNORECASE)
_CLOSING_BOLD = re.compile(r"</b>", re.IGNORECASE)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_THOUSANDS = re.compile(r"(?<=\d),(?=\d{3})")

# "thumb_" inside the image file name segment, e.g. Card_1_thumb_apng.png
_THUMB_TOKEN = re.compile(r"thumb_(?=[^/?]*\.(?:png|gif|jpe?g|webp))", re.IGNORECASE)


def clean_passive_text(text: str | None) -> str:
    """Normalize passive skill text into "; "-separated clauses.

    >>> clean_passive_text("Basic effect(s)ATK +50%\\n- DEF +20%")
    'ATK +50%; DEF +20%'
    """
    if not text:
        return ERROR
    text = _BASIC_EFFECT.sub("", text)
    text = _NEWLINE.sub("; ", text)
    text = _DASH_CLAUSE.sub("; ", text)
    text = _DASH_BULLET.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    text = _SEMICOLONS.sub("; ", text)
    text = _EDGE_SEPARATORS.sub("", text).strip()
    return text or ERROR


def _unescape_amp(text: str) -> str:
    return text.replace("&amp;", "&")


def extract_name(fragment: str | None) -> str:
    """Name half of the "<b>Title<br>Name</b>" header cell."""
    if not fragment:
        return ERROR
    parts = _BR.split(fragment, maxsplit=1)
    if len(parts) < 2:
        return ERROR
    name = _LEADING_BOLD.sub("", parts[1])
    name = _CLOSING_BOLD.split(name)[0]
    name = _unescape_amp(name).strip()
    return name or ERROR


def extract_title(fragment: str | None) -> str:
    """Title half of the "<b>Title<br>Name</b>" header cell."""
    if not fragment:
        return ERROR
    head = _BR.split(fragment, maxsplit=1)[0]
    bold = re.split(r"<b>", head, maxsplit=1, flags=re.IGNORECASE)
    if len(bold) < 2:
        return ERROR
    title = _CLOSING_BOLD.split(bold[1])[0]
    title = _unescape_amp(title).strip()
    return title or ERROR


def safe_parse_int(text: str | None, fallback: int = 0) -> int:
    """Leading integer of text ("140", "5,860 pts"), or fallback."""
    if not text:
        return fallback
    m = _LEADING_INT.match(_THOUSANDS.sub("", text))
    if not m:
        return fallback
    return int(m.group(1))


def full_image_url(url: str) -> str:
    """Full-resolution URL for a card thumbnail; drops the thumb_ token."""
    if not url or url == ERROR:
        return ERROR
    return _THUMB_TOKEN.sub("", url, count=1)
