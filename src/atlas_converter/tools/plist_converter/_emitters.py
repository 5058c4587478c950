"""Map an ``AtlasRecord`` onto each engine's JSON atlas schema.

Every emitter is a pure function of the canonical record, so any number of
dialects can be emitted from one parsed atlas.

``spriteSourceSize`` carries the trim offset as ``(x, y)`` and the original
untrimmed size as ``(w, h)``.  The ``phaser`` dialect is the exception: it
zeroes the origin and publishes the offset in a separate ``offset`` field.
"""

from __future__ import annotations

import enum
import json
from typing import Any

from atlas_converter.core.datatypes import AtlasMetadata, AtlasRecord, FrameRecord

TEXTURE_FORMAT = "RGBA8888"
SPRITESHEET_APP = "PixiJS"
SPRITESHEET_VERSION = "1.0.0"


class Dialect(str, enum.Enum):
    """Target JSON schema.  The value is the name used on the command line."""

    GENERIC = "pixi"
    ALTERNATE = "phaser"
    SPRITESHEET = "pixijs"

    @property
    def suffix(self) -> str:
        """Output file suffix replacing ``.plist`` (e.g. ``-pixi.json``)."""
        return f"-{self.value}.json"


ALL_DIALECTS: tuple[Dialect, ...] = tuple(Dialect)


def emit(atlas: AtlasRecord, dialect: Dialect | str) -> dict[str, Any]:
    """Build the output document for *dialect*.

    Args:
        atlas: The canonical atlas.
        dialect: ``Dialect`` member or its value.

    Returns:
        A JSON-serialisable dict with ``frames`` and ``meta`` keys.
    """
    match Dialect(dialect):
        case Dialect.GENERIC:
            return emit_generic(atlas)
        case Dialect.ALTERNATE:
            return emit_alternate(atlas)
        case Dialect.SPRITESHEET:
            return emit_spritesheet(atlas)


def render_json(document: dict[str, Any]) -> str:
    """Serialise a document with 2-space indentation; frame names stay unescaped."""
    return json.dumps(document, indent=2, ensure_ascii=False)


# ── Dialects ──────────────────────────────────────────────────────────────


def emit_generic(atlas: AtlasRecord) -> dict[str, Any]:
    """Generic texture-atlas schema (``-pixi.json``)."""
    meta = atlas.metadata
    return {
        "frames": {
            frame.name: {
                "frame": _rect(frame),
                "sourceSize": _source_size(frame),
                "spriteSourceSize": _sprite_source_size(frame),
                "rotated": frame.rotated,
                "trimmed": frame.trimmed,
            }
            for frame in atlas.frames
        },
        "meta": {
            "image": meta.image,
            "format": TEXTURE_FORMAT,
            "size": _atlas_size(meta),
            "scale": _scale_text(meta.scale),
            "version": meta.version,
        },
    }


def emit_alternate(atlas: AtlasRecord) -> dict[str, Any]:
    """Alternate-engine atlas schema (``-phaser.json``) with a separate ``offset``."""
    meta = atlas.metadata
    return {
        "frames": {
            frame.name: {
                "frame": _rect(frame),
                "sourceSize": _source_size(frame),
                "spriteSourceSize": {"x": 0, "y": 0, "w": frame.source_size.w, "h": frame.source_size.h},
                "offset": {"x": frame.sprite_offset.x, "y": frame.sprite_offset.y},
                "rotated": frame.rotated,
                "trimmed": frame.trimmed,
            }
            for frame in atlas.frames
        },
        "meta": {
            "image": meta.image,
            "format": TEXTURE_FORMAT,
            "size": _atlas_size(meta),
            "scale": _scale_number(meta.scale),
        },
    }


def emit_spritesheet(atlas: AtlasRecord) -> dict[str, Any]:
    """Spritesheet schema (``-pixijs.json``) with a fixed ``app``/``version`` header."""
    meta = atlas.metadata
    return {
        "frames": {
            frame.name: {
                "frame": _rect(frame),
                "sourceSize": _source_size(frame),
                "spriteSourceSize": _sprite_source_size(frame),
                "rotated": frame.rotated,
                "trimmed": frame.trimmed,
            }
            for frame in atlas.frames
        },
        "meta": {
            "app": SPRITESHEET_APP,
            "version": SPRITESHEET_VERSION,
            "image": meta.image,
            "format": TEXTURE_FORMAT,
            "size": _atlas_size(meta),
            "scale": _scale_text(meta.scale),
        },
    }


# ── Field helpers ─────────────────────────────────────────────────────────


def _rect(frame: FrameRecord) -> dict[str, int]:
    rect = frame.texture_rect
    return {"x": rect.x, "y": rect.y, "w": rect.w, "h": rect.h}


def _source_size(frame: FrameRecord) -> dict[str, int]:
    return {"w": frame.source_size.w, "h": frame.source_size.h}


def _sprite_source_size(frame: FrameRecord) -> dict[str, int]:
    return {
        "x": frame.sprite_offset.x,
        "y": frame.sprite_offset.y,
        "w": frame.source_size.w,
        "h": frame.source_size.h,
    }


def _atlas_size(meta: AtlasMetadata) -> dict[str, int]:
    return {"w": meta.size.w, "h": meta.size.h}


def _scale_number(scale: float) -> int | float:
    return int(scale) if float(scale).is_integer() else scale


def _scale_text(scale: float) -> str:
    return str(_scale_number(scale))
