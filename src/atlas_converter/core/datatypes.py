"""Shared value objects: the canonical atlas model and conversion results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath


@dataclass(frozen=True)
class PathList:
    """An immutable list of filesystem paths produced or consumed by tools."""

    paths: tuple[Path, ...]

    @property
    def count(self) -> int:
        """Return the number of paths in the list."""
        return len(self.paths)


# ── Geometry ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """An integer point; trim offsets may be negative."""

    x: int
    y: int


@dataclass(frozen=True)
class Size:
    """An integer width/height pair."""

    w: int
    h: int


@dataclass(frozen=True)
class Rect:
    """An integer rectangle: origin plus size."""

    x: int
    y: int
    w: int
    h: int

    @property
    def origin(self) -> Point:
        """Top-left corner of the rectangle."""
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        """Width and height of the rectangle."""
        return Size(self.w, self.h)


# ── Raw extractor output ─────────────────────────────────────────────────


@dataclass(frozen=True)
class RawFrame:
    """String-valued geometry for one frame, exactly as found in the plist.

    Attributes:
        name: Frame key (e.g. ``hero.png``).
        texture_rect: ``{{x,y},{w,h}}`` string, or ``None`` when absent.
        source_size: ``{w,h}`` original (untrimmed) size, or ``None``.
        sprite_offset: ``{x,y}`` trim offset, or ``None``.
        sprite_size: ``{w,h}`` trimmed size, or ``None``.
        rotated: True when the packed rect is rotated 90 deg.
        trimmed: True when transparent padding was removed.
    """

    name: str
    texture_rect: str | None = None
    source_size: str | None = None
    sprite_offset: str | None = None
    sprite_size: str | None = None
    rotated: bool = False
    trimmed: bool = False


@dataclass(frozen=True)
class RawAtlas:
    """Extractor output: raw frames in source order plus raw metadata strings."""

    frames: tuple[RawFrame, ...]
    size: str | None = None
    version: str | None = None
    texture_file_name: str | None = None
    texture_extension: str | None = None
    scale: str | None = None

    @property
    def frame_count(self) -> int:
        """Return the number of extracted frames."""
        return len(self.frames)


# ── Canonical model ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class AtlasMetadata:
    """Atlas-level facts with defaults already substituted."""

    size: Size
    version: str
    texture_file_name: str
    texture_extension: str | None = None
    scale: float = 1.0

    @property
    def image(self) -> str:
        """Texture file name as published in the ``meta.image`` field."""
        if self.texture_extension:
            return self.texture_file_name + self.texture_extension
        if PurePosixPath(self.texture_file_name).suffix:
            return self.texture_file_name
        return f"{self.texture_file_name}.png"


@dataclass(frozen=True)
class FrameRecord:
    """One validated sprite entry of the atlas.

    Attributes:
        name: Frame key, unique within the atlas.
        texture_rect: Bounding box of the sprite on the packed texture.
        source_size: Original (untrimmed) sprite dimensions.
        sprite_offset: Trim offset relative to the original artwork.
        sprite_size: Size of the trimmed region.
        rotated: True if the packed rect is rotated 90 deg.
        trimmed: True if transparent padding was removed during packing.
    """

    name: str
    texture_rect: Rect
    source_size: Size
    sprite_offset: Point
    sprite_size: Size
    rotated: bool = False
    trimmed: bool = False


@dataclass(frozen=True)
class AtlasRecord:
    """The canonical atlas: metadata, frames in source order, skip warnings."""

    metadata: AtlasMetadata
    frames: tuple[FrameRecord, ...]
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def frame_count(self) -> int:
        """Return the number of valid frames."""
        return len(self.frames)

    @property
    def frame_names(self) -> tuple[str, ...]:
        """Return frame names in source order."""
        return tuple(frame.name for frame in self.frames)

    def get(self, name: str) -> FrameRecord | None:
        """Look up a frame by name.

        Args:
            name: The frame key (e.g. ``hero.png``).

        Returns:
            The frame, or ``None`` if the atlas has no such frame.
        """
        for frame in self.frames:
            if frame.name == name:
                return frame
        return None


# ── Results ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EmittedDocument:
    """One dialect's output document and where it was (or would be) written."""

    dialect: str
    path: Path
    written: bool


@dataclass(frozen=True)
class ConversionResult:
    """Result of converting one plist into one or more dialects."""

    source: Path
    atlas: AtlasRecord
    outputs: tuple[EmittedDocument, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        """Return the number of frames written per document."""
        return self.atlas.frame_count

    @property
    def warnings(self) -> tuple[str, ...]:
        """Return the per-frame warnings collected while building the model."""
        return self.atlas.warnings

    @property
    def paths(self) -> tuple[Path, ...]:
        """Return the output paths in dialect order."""
        return tuple(doc.path for doc in self.outputs)
