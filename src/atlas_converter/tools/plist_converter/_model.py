"""Build the canonical ``AtlasRecord`` from a ``RawAtlas``.

Geometry strings become integer rects, sizes and points.  A frame with
missing or malformed geometry is dropped with a warning and the rest of the
atlas is still converted; only an atlas with no valid frame at all fails.
"""

from __future__ import annotations

import logging
import math

from atlas_converter.core.config import ConverterDefaults
from atlas_converter.core.datatypes import AtlasMetadata, AtlasRecord, FrameRecord, RawAtlas, RawFrame, Size
from atlas_converter.core.events import EventBus
from atlas_converter.core.exceptions import AllFramesInvalidError, FrameValidationError
from atlas_converter.tools.plist_converter._geometry import parse_point, parse_rect, parse_size

logger = logging.getLogger(__name__)


def build_atlas(
    raw: RawAtlas,
    defaults: ConverterDefaults | None = None,
    *,
    event_bus: EventBus | None = None,
) -> AtlasRecord:
    """Validate raw frames and normalise metadata into an ``AtlasRecord``.

    Args:
        raw: Extractor output.
        defaults: Fallback metadata; ``ConverterDefaults()`` when omitted.
        event_bus: Optional bus receiving ``progress`` and ``warning`` events.

    Returns:
        The immutable canonical atlas.

    Raises:
        AllFramesInvalidError: If no frame survives validation.
    """
    defaults = defaults or ConverterDefaults()
    total = raw.frame_count
    frames: list[FrameRecord] = []
    warnings: list[str] = []

    for idx, raw_frame in enumerate(raw.frames):
        try:
            frame = build_frame(raw_frame)
        except FrameValidationError as exc:
            message = f"Skipping frame '{raw_frame.name}': {exc}"
            logger.warning("%s", message)
            warnings.append(message)
            if event_bus is not None:
                event_bus.emit("warning", tool="plist_converter", frame=raw_frame.name, message=message)
            continue

        frames.append(frame)
        if event_bus is not None:
            rect = frame.texture_rect
            event_bus.emit(
                "progress",
                tool="plist_converter",
                current=idx + 1,
                total=total,
                message=f"Parsed {frame.name} ({rect.w}x{rect.h})",
            )

    if not frames:
        msg = f"All {total} frames failed validation; nothing to convert"
        raise AllFramesInvalidError(msg)

    return AtlasRecord(
        metadata=build_metadata(raw, defaults),
        frames=tuple(frames),
        warnings=tuple(warnings),
    )


def build_frame(raw: RawFrame) -> FrameRecord:
    """Convert one raw frame into a ``FrameRecord``.

    Args:
        raw: The raw frame.

    Returns:
        The validated frame.

    Raises:
        FrameValidationError: If a required field is missing, unparseable or
            out of range.
    """
    if not raw.texture_rect or not raw.source_size or not raw.sprite_offset:
        fields = {
            "textureRect": raw.texture_rect,
            "spriteSourceSize": raw.source_size,
            "spriteOffset": raw.sprite_offset,
        }
        missing = ", ".join(label for label, value in fields.items() if not value)
        msg = f"missing {missing}"
        raise FrameValidationError(msg)

    rect = parse_rect(raw.texture_rect)
    source_size = parse_size(raw.source_size)
    offset = parse_point(raw.sprite_offset)

    if rect.w <= 0 or rect.h <= 0:
        msg = f"textureRect has non-positive size {rect.w}x{rect.h}"
        raise FrameValidationError(msg)
    origin = rect.origin
    if origin.x < 0 or origin.y < 0:
        msg = f"textureRect has negative origin ({origin.x},{origin.y})"
        raise FrameValidationError(msg)
    if source_size.w < 0 or source_size.h < 0:
        msg = f"spriteSourceSize is negative {source_size.w}x{source_size.h}"
        raise FrameValidationError(msg)

    # spriteSize is optional; an unusable value falls back to the packed size.
    sprite_size = rect.size
    if raw.sprite_size:
        try:
            sprite_size = parse_size(raw.sprite_size)
        except FrameValidationError:
            logger.info("Frame '%s': ignoring unparseable spriteSize %r", raw.name, raw.sprite_size)

    return FrameRecord(
        name=raw.name,
        texture_rect=rect,
        source_size=source_size,
        sprite_offset=offset,
        sprite_size=sprite_size,
        rotated=raw.rotated,
        trimmed=raw.trimmed,
    )


def build_metadata(raw: RawAtlas, defaults: ConverterDefaults) -> AtlasMetadata:
    """Resolve atlas metadata, substituting defaults for absent fields.

    A present but unparseable value is treated as absent.

    Args:
        raw: Extractor output.
        defaults: Fallback values.

    Returns:
        The resolved metadata.
    """
    size = Size(*defaults.size)
    if raw.size:
        try:
            parsed = parse_size(raw.size)
        except FrameValidationError:
            logger.info("Unparseable atlas size %r; using default %dx%d", raw.size, size.w, size.h)
        else:
            if parsed.w > 0 and parsed.h > 0:
                size = parsed
            else:
                logger.info("Non-positive atlas size %r; using default %dx%d", raw.size, size.w, size.h)
    else:
        logger.info("No atlas size in plist; using default %dx%d", size.w, size.h)

    scale = defaults.scale
    if raw.scale:
        try:
            parsed_scale = float(raw.scale)
        except ValueError:
            logger.info("Unparseable atlas scale %r; using default %s", raw.scale, scale)
        else:
            if math.isfinite(parsed_scale) and parsed_scale > 0:
                scale = parsed_scale
            else:
                logger.info("Non-positive or non-finite atlas scale %r; using default %s", raw.scale, scale)

    return AtlasMetadata(
        size=size,
        version=raw.version or defaults.version,
        texture_file_name=raw.texture_file_name or defaults.texture_file_name,
        texture_extension=raw.texture_extension or None,
        scale=scale,
    )
