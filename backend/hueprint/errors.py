"""
Hueprint Error Types
Validation failures raised before the quantization core runs.
"""


class PaletteError(Exception):
    """Base class for terminal extraction failures."""

    code = "palette_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidType(PaletteError):
    """Declared MIME type is not in the allow-list."""

    code = "invalid_type"
    status_code = 415


class TooLarge(PaletteError):
    """File size exceeds the configured limit."""

    code = "too_large"
    status_code = 413


class CorruptImage(PaletteError):
    """Bytes failed the integrity check or could not be decoded."""

    code = "corrupt_image"
    status_code = 400


class ResolutionExceeded(PaletteError):
    """Decoded dimensions exceed the configured maximum."""

    code = "resolution_exceeded"
    status_code = 422
