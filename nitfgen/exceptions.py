"""
Exceptions raised while rendering derived images.

Every render failure is an ``IOError`` so callers that only care about
"this rendition could not be produced" can catch the built-in.
"""


class NitfGenError(Exception):
    """Base exception for nitfgen errors."""


class SourceReadError(NitfGenError, IOError):
    """The source container header could not be read."""


class RenderError(NitfGenError, IOError):
    """A renderer could not produce the requested image."""


class ExternalToolError(RenderError):
    """The external translation tool failed or produced no output."""

    def __init__(self, message: str, output: str = ''):
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)
        self.output = output


class DecodeError(RenderError):
    """No image segment of the source could be decoded."""


class EncodeError(RenderError):
    """The decoded bitmap could not be encoded to the output format."""


class SourceTooLargeError(RenderError):
    """Unrenderable: the source is too large to decode in memory."""

    def __init__(self, size_mb: int, max_size_mb: int):
        super().__init__(
            f"Unrenderable: too large ({size_mb} MB exceeds {max_size_mb} MB limit)"
        )
        self.size_mb = size_mb
        self.max_size_mb = max_size_mb
