"""Extract raw frames and metadata from TexturePacker .plist atlas text.

Two strategies produce the same ``RawAtlas``:

``strict``
    Decodes the whole document with ``plistlib`` and reads keys from the
    resulting tree.  Exact, but fails on markup that is not well-formed.

``tolerant``
    Scans the text with regular expressions.  Each
    ``<key>NAME.png</key><dict>...</dict>`` block is a frame; sub-fields are
    searched only inside that block.  Survives markup ``plistlib`` rejects.

Frame dictionary keys used::

    textureRect / frame              ``{{x,y},{w,h}}`` in the atlas
    spriteSourceSize / sourceSize    ``{w,h}`` original (untrimmed) size
    spriteOffset / offset            ``{x,y}`` trim offset
    spriteSize                       ``{w,h}`` trimmed size (format 3 only)
    textureRotated / rotated         bool
    spriteTrimmed                    bool (format 3 only)

Format 3 keys win when both spellings are present.
"""

from __future__ import annotations

import enum
import logging
import plistlib
import re
from typing import Any

from atlas_converter.core.datatypes import RawAtlas, RawFrame
from atlas_converter.core.exceptions import EmptyContentError, ParseFailureError, ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "webp", "bmp", "gif", "tga")

_RECT_KEYS = ("textureRect", "frame")
_SOURCE_SIZE_KEYS = ("spriteSourceSize", "sourceSize")
_OFFSET_KEYS = ("spriteOffset", "offset")
_ROTATED_KEYS = ("textureRotated", "rotated")


class ExtractionStrategy(str, enum.Enum):
    """How the plist text is turned into raw frames."""

    STRICT = "strict"
    TOLERANT = "tolerant"


def normalize_newlines(text: str) -> str:
    """Convert CRLF (and stray CR) line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def extract_raw_atlas(text: str, strategy: ExtractionStrategy | str = ExtractionStrategy.STRICT) -> RawAtlas:
    """Extract raw frames and metadata using the chosen strategy.

    Args:
        text: Plist document text.
        strategy: ``ExtractionStrategy`` member or its value (``"strict"``,
            ``"tolerant"``).

    Returns:
        The raw atlas with at least one frame.

    Raises:
        ParseFailureError: If the strict strategy cannot decode the markup.
        EmptyContentError: If no frames were found.
        ValidationError: If *strategy* is not a known strategy.
    """
    try:
        strategy = ExtractionStrategy(strategy)
    except ValueError as exc:
        choices = [s.value for s in ExtractionStrategy]
        msg = f"Unknown extraction strategy '{strategy}'; expected one of {choices}"
        raise ValidationError(msg) from exc
    text = normalize_newlines(text)
    if strategy is ExtractionStrategy.STRICT:
        raw = extract_strict(text)
    else:
        raw = extract_tolerant(text)

    if raw.frame_count == 0:
        msg = "No image frames found in plist"
        raise EmptyContentError(msg)

    logger.debug("Extracted %d raw frames (%s)", raw.frame_count, strategy.value)
    return raw


# ---------------------------------------------------------------------------
# Strict strategy
# ---------------------------------------------------------------------------


def extract_strict(text: str) -> RawAtlas:
    """Decode *text* with ``plistlib`` and read frames and metadata by key.

    Args:
        text: Plist document text.

    Returns:
        The raw atlas; may contain zero frames.

    Raises:
        ParseFailureError: If the document cannot be decoded or its root is
            not a dictionary.
    """
    try:
        data = plistlib.loads(text.encode("utf-8"))
    except Exception as exc:
        msg = f"Failed to decode plist markup: {exc}"
        raise ParseFailureError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Plist root must be a dictionary, got {type(data).__name__}"
        raise ParseFailureError(msg)

    frames_raw = data.get("frames")
    frames: list[RawFrame] = []
    if isinstance(frames_raw, dict):
        for name, info in frames_raw.items():
            if not isinstance(info, dict):
                # Kept without geometry so the builder reports it.
                frames.append(RawFrame(name=str(name)))
                continue
            frames.append(
                RawFrame(
                    name=str(name),
                    texture_rect=_first_string(info, _RECT_KEYS),
                    source_size=_first_string(info, _SOURCE_SIZE_KEYS),
                    sprite_offset=_first_string(info, _OFFSET_KEYS),
                    sprite_size=_first_string(info, ("spriteSize",)),
                    rotated=any(info.get(key) is True for key in _ROTATED_KEYS),
                    trimmed=info.get("spriteTrimmed") is True,
                )
            )

    meta = data.get("metadata")
    meta = meta if isinstance(meta, dict) else {}
    target = meta.get("target")
    target = target if isinstance(target, dict) else {}

    texture_name = _as_string(target.get("textureFileName"))
    texture_ext = _as_string(target.get("textureFileExtension"))
    if texture_name is None:
        texture_name = _as_string(meta.get("textureFileName"))

    return RawAtlas(
        frames=tuple(frames),
        size=_as_string(meta.get("size")),
        version=_as_string(meta.get("version")),
        texture_file_name=texture_name,
        texture_extension=texture_ext,
        scale=_as_string(meta.get("scale")),
    )


def _first_string(info: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = _as_string(info.get(key))
        if value:
            return value
    return None


def _as_string(value: Any) -> str | None:
    """Return *value* as a stripped string; ``None`` for absent or nested values."""
    if value is None or isinstance(value, (dict, list, bytes, bool)):
        return None
    return str(value).strip()


# ---------------------------------------------------------------------------
# Tolerant strategy
# ---------------------------------------------------------------------------

_FRAME_BLOCK_RE = re.compile(
    r"<key>\s*([^<]+?\.(?:" + "|".join(IMAGE_EXTENSIONS) + r"))\s*</key>\s*<dict>(.*?)</dict>",
    re.IGNORECASE | re.DOTALL,
)
_METADATA_KEY_RE = re.compile(r"<key>\s*metadata\s*</key>", re.IGNORECASE)
_TARGET_BLOCK_RE = re.compile(r"<key>\s*target\s*</key>\s*<dict>(.*?)</dict>", re.IGNORECASE | re.DOTALL)


def extract_tolerant(text: str) -> RawAtlas:
    """Scan *text* for frame blocks and metadata fields with regexes.

    Only keys ending in a recognised image extension are frame names, so
    the ``metadata`` and ``target`` sections are never mistaken for frames.

    Args:
        text: Plist document text.

    Returns:
        The raw atlas; may contain zero frames.
    """
    frames: dict[str, RawFrame] = {}
    for match in _FRAME_BLOCK_RE.finditer(text):
        name = match.group(1).strip()
        block = match.group(2)
        if name in frames:
            logger.warning("Duplicate frame key %r; keeping the last definition", name)
        frames[name] = RawFrame(
            name=name,
            texture_rect=_block_string(block, _RECT_KEYS),
            source_size=_block_string(block, _SOURCE_SIZE_KEYS),
            sprite_offset=_block_string(block, _OFFSET_KEYS),
            sprite_size=_block_string(block, ("spriteSize",)),
            rotated=any(_block_flag(block, key) for key in _ROTATED_KEYS),
            trimmed=_block_flag(block, "spriteTrimmed"),
        )

    meta_match = _METADATA_KEY_RE.search(text)
    meta_text = text[meta_match.end() :] if meta_match else text

    texture_name: str | None = None
    texture_ext: str | None = None
    target_match = _TARGET_BLOCK_RE.search(meta_text)
    if target_match:
        target = target_match.group(1)
        texture_name = _block_string(target, ("textureFileName",))
        texture_ext = _block_string(target, ("textureFileExtension",))
    if texture_name is None:
        texture_name = _block_string(meta_text, ("textureFileName",))

    return RawAtlas(
        frames=tuple(frames.values()),
        size=_block_string(meta_text, ("size",)),
        version=_block_string(meta_text, ("version",)),
        texture_file_name=texture_name,
        texture_extension=texture_ext,
        scale=_block_number(meta_text, "scale"),
    )


def _block_string(block: str, keys: tuple[str, ...]) -> str | None:
    """Return the first non-empty ``<string>`` value following any of *keys* in *block*."""
    for key in keys:
        pattern = rf"<key>\s*{re.escape(key)}\s*</key>\s*<string>(.*?)</string>"
        match = re.search(pattern, block, re.IGNORECASE | re.DOTALL)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def _block_number(block: str, key: str) -> str | None:
    """Return a ``<real>``, ``<integer>`` or ``<string>`` value following *key*."""
    pattern = rf"<key>\s*{re.escape(key)}\s*</key>\s*<(real|integer|string)>(.*?)</\1>"
    match = re.search(pattern, block, re.IGNORECASE | re.DOTALL)
    return match.group(2).strip() if match else None


def _block_flag(block: str, key: str) -> bool:
    """Return True when ``<key>KEY</key>`` is followed by ``<true/>`` in *block*."""
    pattern = rf"<key>\s*{re.escape(key)}\s*</key>\s*<true\s*/>"
    return re.search(pattern, block, re.IGNORECASE) is not None
