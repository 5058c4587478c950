"""Exception hierarchy for the atlas-converter package."""


class ConverterError(Exception):
    """Base exception for all atlas-converter errors."""


class ToolError(ConverterError):
    """Raised when a conversion run fails at the atlas level."""


class InputNotFoundError(ToolError):
    """Raised when the source plist path does not exist."""


class ParseFailureError(ToolError):
    """Raised when the plist markup cannot be read or decoded at all."""


class EmptyContentError(ToolError):
    """Raised when the plist parsed but defines no image frames."""


class AllFramesInvalidError(ToolError):
    """Raised when every extracted frame failed geometry validation."""


class FrameValidationError(ConverterError):
    """Raised for a single malformed frame; callers skip the frame and continue."""


class ValidationError(ConverterError):
    """Raised when parameter validation fails."""
