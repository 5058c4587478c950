"""PlistConverterTool: BaseTool wrapper for plist-to-JSON atlas conversion."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from atlas_converter.core.base_tool import BaseTool, ToolParameter
from atlas_converter.core.config import ConverterDefaults
from atlas_converter.core.datatypes import ConversionResult, PathList
from atlas_converter.core.events import EventBus
from atlas_converter.core.exceptions import ValidationError
from atlas_converter.tools.plist_converter._emitters import Dialect
from atlas_converter.tools.plist_converter._plist import ExtractionStrategy
from atlas_converter.tools.plist_converter.logic import convert_plist, validate_convert_params


class PlistConverterTool(BaseTool):
    """Convert a TexturePacker ``.plist`` atlas into engine JSON descriptors.

    One canonical atlas is built per run and emitted to every requested
    dialect (``pixi``, ``phaser``, ``pixijs``).
    """

    name = "plist_converter"
    display_name = "Plist Converter"
    description = "Convert a TexturePacker .plist atlas into Pixi/Phaser JSON"
    version = "0.1.0"

    def __init__(self, event_bus: EventBus | None = None, defaults: ConverterDefaults | None = None) -> None:
        """Initialise the converter tool.

        Args:
            event_bus: Shared event bus for progress reporting.
            defaults: Metadata fallbacks; built-in defaults when ``None``.
        """
        super().__init__(event_bus=event_bus)
        self.defaults = defaults or ConverterDefaults()

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for plist conversion."""
        return [
            ToolParameter(
                name="input",
                label="Plist file",
                type=Path,
                help="Path to the TexturePacker .plist atlas descriptor.",
            ),
            ToolParameter(
                name="dialects",
                label="Dialects",
                type=str,
                default=[d.value for d in Dialect],
                choices=[d.value for d in Dialect],
                multiple=True,
                help="Target JSON schemas (default: all).",
            ),
            ToolParameter(
                name="strategy",
                label="Parser",
                type=str,
                default=ExtractionStrategy.STRICT.value,
                choices=[s.value for s in ExtractionStrategy],
                help="'strict' decodes the full plist; 'tolerant' scans the text.",
            ),
            ToolParameter(
                name="output_dir",
                label="Output directory",
                type=Path,
                default=None,
                help="Directory for the JSON files (default: next to input).",
            ),
            ToolParameter(
                name="dry_run",
                label="Dry run",
                type=bool,
                default=False,
                help="Build and emit the documents without writing files.",
            ),
        ]

    def input_types(self) -> list[type]:
        """Accept a ``PathList`` whose first entry is the plist."""
        return [PathList]

    def output_types(self) -> list[type]:
        """Produce a ``ConversionResult``."""
        return [ConversionResult]

    def validate(self, params: dict[str, Any]) -> None:
        """Validate parameters with converter-specific rules.

        When ``input`` is ``None`` the plist checks are skipped because the
        path may arrive via ``input_data``.

        Args:
            params: Parameter dict to validate.

        Raises:
            ValidationError: If parameters are invalid.
            InputNotFoundError: If the plist does not exist.
        """
        super().validate(params)

        raw_input = params.get("input")
        if raw_input is None:
            return

        output_dir = params.get("output_dir")
        validate_convert_params(
            plist_path=Path(raw_input),
            output_dir=Path(output_dir) if output_dir is not None else None,
        )

    def _do_execute(self, params: dict[str, Any], input_data: Any) -> ConversionResult:
        """Run the conversion.

        Args:
            params: Validated parameter dictionary.
            input_data: Optional ``PathList`` supplying the plist path.

        Returns:
            The ``ConversionResult``.

        Raises:
            ValidationError: If the input cannot be resolved.
        """
        if input_data is not None and isinstance(input_data, PathList):
            if input_data.count == 0:
                msg = "Empty PathList received as input"
                raise ValidationError(msg)
            plist_path = input_data.paths[0]
            validate_convert_params(plist_path=plist_path)
        else:
            raw_input = params.get("input")
            if raw_input is None:
                msg = "No input .plist file provided"
                raise ValidationError(msg)
            plist_path = Path(raw_input)

        raw_output = params.get("output_dir")
        return convert_plist(
            plist_path,
            params.get("dialects"),
            strategy=params.get("strategy") or ExtractionStrategy.STRICT,
            defaults=self.defaults,
            output_dir=Path(raw_output) if raw_output is not None else None,
            dry_run=bool(params.get("dry_run", False)),
            event_bus=self.event_bus,
        )
