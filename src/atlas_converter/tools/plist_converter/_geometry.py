"""Parse packer geometry strings into integer points, sizes and rects.

Accepted shapes::

    {{x,y},{w,h}}   rect, TexturePacker / Cocos2d format 2 and 3
    {x,y,w,h}       flat rect
    {x,y}           point or size

Whitespace around numbers is ignored and decimals are truncated toward zero.
Signs are preserved; values beyond ``MAX_COMPONENT`` are rejected, other range
checks belong to the model builder.
"""

import re
from decimal import Decimal

from atlas_converter.core.datatypes import Point, Rect, Size
from atlas_converter.core.exceptions import FrameValidationError

# Largest magnitude accepted for any coordinate or dimension.
MAX_COMPONENT = 2**31 - 1

_NUM = r"\s*(-?\d+(?:\.\d+)?)\s*"

_NESTED_RECT_RE = re.compile(rf"^\{{\s*\{{{_NUM},{_NUM}\}}\s*,\s*\{{{_NUM},{_NUM}\}}\s*\}}$")
_FLAT_RECT_RE = re.compile(rf"^\{{{_NUM},{_NUM},{_NUM},{_NUM}\}}$")
_PAIR_RE = re.compile(rf"^\{{{_NUM},{_NUM}\}}$")


def parse_rect(s: str) -> Rect:
    """Parse a rect string into a ``Rect``.

    Args:
        s: The raw rect string from the plist.

    Returns:
        The parsed rectangle.

    Raises:
        FrameValidationError: If the string is not a rect.
    """
    text = s.strip()
    match = _NESTED_RECT_RE.match(text) or _FLAT_RECT_RE.match(text)
    if match is None:
        msg = f"Cannot parse rect string: {s!r}"
        raise FrameValidationError(msg)
    x, y, w, h = (_to_int(g, s) for g in match.groups())
    return Rect(x, y, w, h)


def parse_point(s: str) -> Point:
    """Parse a ``{x,y}`` string into a ``Point``.

    Args:
        s: The raw point string from the plist.

    Returns:
        The parsed point; negative components are kept.

    Raises:
        FrameValidationError: If the string is not a pair of numbers.
    """
    x, y = _parse_pair(s, kind="point")
    return Point(x, y)


def parse_size(s: str) -> Size:
    """Parse a ``{w,h}`` string into a ``Size``.

    Args:
        s: The raw size string from the plist.

    Returns:
        The parsed size.

    Raises:
        FrameValidationError: If the string is not a pair of numbers.
    """
    w, h = _parse_pair(s, kind="size")
    return Size(w, h)


def _parse_pair(s: str, *, kind: str) -> tuple[int, int]:
    match = _PAIR_RE.match(s.strip())
    if match is None:
        msg = f"Cannot parse {kind} string: {s!r}"
        raise FrameValidationError(msg)
    return _to_int(match.group(1), s), _to_int(match.group(2), s)


def _to_int(token: str, source: str) -> int:
    """Truncate a decimal token toward zero without going through ``float``."""
    number = Decimal(token)
    if abs(number) > MAX_COMPONENT:
        msg = f"Value out of range in geometry string: {source!r}"
        raise FrameValidationError(msg)
    return int(number)
