"""Plist-to-JSON conversion logic.  Pure functions, no console output.

Reads a TexturePacker ``.plist``, builds the canonical atlas once, then
emits and writes one JSON document per requested dialect next to the input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from atlas_converter.core.config import ConverterDefaults
from atlas_converter.core.datatypes import AtlasRecord, ConversionResult, EmittedDocument
from atlas_converter.core.events import EventBus
from atlas_converter.core.exceptions import InputNotFoundError, ParseFailureError, ToolError, ValidationError
from atlas_converter.tools.plist_converter._emitters import ALL_DIALECTS, Dialect, emit, render_json
from atlas_converter.tools.plist_converter._model import build_atlas
from atlas_converter.tools.plist_converter._plist import ExtractionStrategy, extract_raw_atlas

logger = logging.getLogger(__name__)

_PLIST_SUFFIX = ".plist"


# ── Validation ────────────────────────────────────────────────────────────


def validate_convert_params(*, plist_path: Path | None, output_dir: Path | None = None) -> None:
    """Validate conversion parameters before processing.

    Args:
        plist_path: Path to the .plist descriptor file.
        output_dir: Optional directory for the JSON files.

    Raises:
        ValidationError: If the plist path is missing or not a .plist file,
            or *output_dir* exists but is not a directory.
        InputNotFoundError: If the plist file does not exist.
    """
    if plist_path is None:
        msg = "A .plist file path is required"
        raise ValidationError(msg)
    if not plist_path.exists():
        msg = f"Plist file does not exist: '{plist_path}'"
        raise InputNotFoundError(msg)
    if plist_path.suffix.lower() != _PLIST_SUFFIX:
        msg = f"Expected a .plist file, got: '{plist_path.name}'"
        raise ValidationError(msg)
    if output_dir is not None and output_dir.exists() and not output_dir.is_dir():
        msg = f"Output path is not a directory: '{output_dir}'"
        raise ValidationError(msg)


def resolve_dialects(dialects: Iterable[Dialect | str] | None) -> tuple[Dialect, ...]:
    """Normalise a dialect selection, dropping duplicates and keeping order.

    Args:
        dialects: Members or values; ``None`` or empty selects every dialect.

    Returns:
        The selected dialects.

    Raises:
        ValidationError: If a name is not a known dialect.
    """
    if not dialects:
        return ALL_DIALECTS
    if isinstance(dialects, (str, Dialect)):
        dialects = [dialects]
    resolved: list[Dialect] = []
    for item in dialects:
        try:
            dialect = Dialect(item)
        except ValueError as exc:
            choices = [d.value for d in Dialect]
            msg = f"Unknown dialect '{item}'; expected one of {choices}"
            raise ValidationError(msg) from exc
        if dialect not in resolved:
            resolved.append(dialect)
    return tuple(resolved)


# ── Public API ────────────────────────────────────────────────────────────


def output_path_for(plist_path: Path, dialect: Dialect | str, output_dir: Path | None = None) -> Path:
    """Return where the JSON for *dialect* is written.

    The trailing ``.plist`` extension is replaced by the dialect suffix
    (``hero.plist`` → ``hero-pixi.json``); other names get the suffix
    appended.

    Args:
        plist_path: Path to the source plist.
        dialect: Target dialect.
        output_dir: Directory override; defaults to the plist's directory.

    Returns:
        The output file path.
    """
    name = plist_path.name
    if name.lower().endswith(_PLIST_SUFFIX):
        name = name[: -len(_PLIST_SUFFIX)]
    directory = output_dir if output_dir is not None else plist_path.parent
    return directory / (name + Dialect(dialect).suffix)


def read_plist_text(plist_path: Path) -> str:
    """Read a plist as UTF-8 text with LF line endings.

    Args:
        plist_path: Path to the .plist file.

    Returns:
        The document text.

    Raises:
        InputNotFoundError: If the file does not exist.
        ParseFailureError: If the file cannot be read or is not UTF-8.
    """
    if not plist_path.is_file():
        msg = f"Plist file does not exist: '{plist_path}'"
        raise InputNotFoundError(msg)
    try:
        text = plist_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Failed to read plist file '{plist_path}'"
        raise ParseFailureError(msg) from exc
    return text.replace("\r\n", "\n")


def load_atlas(
    plist_path: Path,
    *,
    strategy: ExtractionStrategy | str = ExtractionStrategy.STRICT,
    defaults: ConverterDefaults | None = None,
    event_bus: EventBus | None = None,
) -> AtlasRecord:
    """Read, extract and build the canonical atlas for *plist_path*.

    Args:
        plist_path: Path to the .plist file.
        strategy: Extraction strategy.
        defaults: Metadata fallbacks.
        event_bus: Optional bus for ``progress`` and ``warning`` events.

    Returns:
        The canonical atlas.

    Raises:
        ToolError: Any atlas-level failure (missing input, undecodable
            markup, no frames, no valid frames).
    """
    text = read_plist_text(plist_path)
    raw = extract_raw_atlas(text, strategy)
    logger.info("Extracted %d frames from %s", raw.frame_count, plist_path.name)
    return build_atlas(raw, defaults, event_bus=event_bus)


def convert_plist(
    plist_path: Path,
    dialects: Iterable[Dialect | str] | None = None,
    *,
    strategy: ExtractionStrategy | str = ExtractionStrategy.STRICT,
    defaults: ConverterDefaults | None = None,
    output_dir: Path | None = None,
    dry_run: bool = False,
    event_bus: EventBus | None = None,
) -> ConversionResult:
    """Convert one plist into a JSON document per dialect.

    The atlas is built once and every dialect is emitted from it.  Nothing
    is written when an atlas-level error occurs.

    Args:
        plist_path: Path to the .plist file.
        dialects: Dialects to emit; ``None`` emits all of them.
        strategy: Extraction strategy.
        defaults: Metadata fallbacks.
        output_dir: Directory override for the JSON files.
        dry_run: When True, build and emit but write nothing.
        event_bus: Optional bus for ``progress``, ``warning`` and
            ``completed`` events.

    Returns:
        A ``ConversionResult`` describing the atlas and each output.

    Raises:
        ToolError: Any atlas-level failure, or a failed write.
        ValidationError: If a dialect name is unknown.
    """
    selected = resolve_dialects(dialects)
    atlas = load_atlas(plist_path, strategy=strategy, defaults=defaults, event_bus=event_bus)

    rendered: list[tuple[Dialect, Path, str]] = [
        (dialect, output_path_for(plist_path, dialect, output_dir), render_json(emit(atlas, dialect)))
        for dialect in selected
    ]

    outputs: list[EmittedDocument] = []
    for dialect, out_path, content in rendered:
        if not dry_run:
            _write_document(out_path, content)
            logger.info("Wrote %s (%d frames)", out_path, atlas.frame_count)
        outputs.append(EmittedDocument(dialect=dialect.value, path=out_path, written=not dry_run))

    if event_bus is not None:
        event_bus.emit(
            "completed",
            tool="plist_converter",
            message=(
                f"Done: {atlas.frame_count} frames from '{plist_path.name}' "
                f"to {len(outputs)} dialect(s), {len(atlas.warnings)} skipped"
            ),
        )

    return ConversionResult(source=plist_path, atlas=atlas, outputs=tuple(outputs))


def probe_plist(
    plist_path: Path,
    *,
    strategy: ExtractionStrategy | str = ExtractionStrategy.STRICT,
    defaults: ConverterDefaults | None = None,
) -> dict[str, Any]:
    """Return facts about a plist without writing anything.

    Args:
        plist_path: Path to the .plist descriptor file.
        strategy: Extraction strategy.
        defaults: Metadata fallbacks.

    Returns:
        A dict with keys: ``plist``, ``frame_count``, ``frame_names``,
        ``image``, ``size``, ``version``, ``warnings``.
    """
    atlas = load_atlas(plist_path, strategy=strategy, defaults=defaults)
    meta = atlas.metadata
    return {
        "plist": plist_path.resolve(),
        "frame_count": atlas.frame_count,
        "frame_names": list(atlas.frame_names),
        "image": meta.image,
        "size": (meta.size.w, meta.size.h),
        "version": meta.version,
        "warnings": list(atlas.warnings),
    }


# ── Internal helpers ──────────────────────────────────────────────────────


def _write_document(path: Path, content: str) -> None:
    """Write one JSON document, creating the parent directory if needed.

    Raises:
        ToolError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write '{path}'"
        raise ToolError(msg) from exc
