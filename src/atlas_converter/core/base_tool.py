"""BaseTool ABC: the contract every converter tool implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from atlas_converter.core.events import EventBus
from atlas_converter.core.exceptions import ValidationError


@dataclass
class ToolParameter:
    """Declarative parameter definition used to document and validate tool params."""

    name: str
    label: str
    type: type
    default: Any = None
    choices: list[Any] | None = None
    multiple: bool = False
    help: str = ""


class BaseTool(ABC):
    """Template Method base for every tool.

    Subclasses override the abstract methods to provide tool-specific
    metadata, parameter definitions, I/O types, and execution logic.
    """

    # ── metadata (override in subclass) ────────────────────────
    name: str
    display_name: str
    description: str
    version: str = "0.1.0"

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialise the tool with an optional event bus.

        Args:
            event_bus: Event bus for progress, warning and completion events.
                       A default bus is created if none is provided.
        """
        self.event_bus = event_bus or EventBus()

    # ── parameter schema ───────────────────────────────────────
    @abstractmethod
    def define_parameters(self) -> list[ToolParameter]:
        """Return the list of parameters this tool accepts."""
        ...

    # ── I/O port declarations ──────────────────────────────────
    @abstractmethod
    def input_types(self) -> list[type]:
        """Return data types this tool can receive as ``input_data``."""
        ...

    @abstractmethod
    def output_types(self) -> list[type]:
        """Return data types this tool produces."""
        ...

    # ── lifecycle (Template Method skeleton) ───────────────────
    def run(self, params: dict[str, Any], input_data: Any = None) -> Any:
        """Execute the tool.  Public entry point, do NOT override.

        Args:
            params: Dictionary of parameter values keyed by parameter name.
            input_data: Optional input data (e.g. a ``PathList``).

        Returns:
            The result produced by the tool's core logic.
        """
        self.validate(params)
        self._pre_execute(params)
        result = self._do_execute(params, input_data)
        self._post_execute(result)
        return result

    def validate(self, params: dict[str, Any]) -> None:
        """Validate params against ``define_parameters()``.

        The base implementation checks that values with ``choices`` are
        within the allowed set; for ``multiple`` parameters every item is
        checked.

        Args:
            params: Parameter dict to validate.

        Raises:
            ValidationError: If any parameter is invalid.
        """
        for param in self.define_parameters():
            value = params.get(param.name)
            if value is None or param.choices is None:
                continue
            values = list(value) if param.multiple and not isinstance(value, str) else [value]
            for item in values:
                if item not in param.choices:
                    msg = f"Parameter '{param.name}' must be one of {param.choices}, got '{item}'"
                    raise ValidationError(msg)

    def _pre_execute(self, params: dict[str, Any]) -> None:  # noqa: B027
        """Hook called before execution (optional override).

        Args:
            params: The validated parameter dict.
        """

    @abstractmethod
    def _do_execute(self, params: dict[str, Any], input_data: Any) -> Any:
        """Core logic.  MUST override.  Pure computation, no console output.

        Args:
            params: Validated parameter dictionary.
            input_data: Optional input data.

        Returns:
            The tool's result.
        """
        ...

    def _post_execute(self, result: Any) -> None:  # noqa: B027
        """Hook called after execution (optional override).

        Args:
            result: The value returned by ``_do_execute``.
        """
