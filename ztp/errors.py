"""
Exceptions raised by the ztp template engine.

Every error raised by the library derives from TemplateError so callers can
catch the whole family at once.
"""

from typing import Any, Optional


class TemplateError(Exception):
    """Base exception for all ztp errors."""

    pass


class ConfigurationError(TemplateError):
    """Raised when a mandatory builder setting is missing."""

    pass


class FilesystemError(TemplateError):
    """Raised when the template source can't be traversed or read."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class TemplateSyntaxError(TemplateError):
    """Raised when a template file can't be compiled."""

    def __init__(self, name: str, message: str, lineno: Optional[int] = None):
        self.name = name
        self.message = message
        self.lineno = lineno
        location = f"{name}:{lineno}" if lineno is not None else name
        super().__init__(f"Failed to parse template '{location}': {message}")


class TemplateNotFoundError(TemplateError):
    """Raised when a template name is not part of the template set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Template not found: {name}")


class UnsupportedTypeError(TemplateError):
    """Raised when the base64 function receives a value it can't encode."""

    def __init__(self, value: Any):
        self.value_type = type(value)
        super().__init__(
            f"Don't know how to encode value of type {self.value_type.__name__}"
        )


class SerializationError(TemplateError):
    """Raised when the json function receives a value it can't serialize."""

    def __init__(self, message: str, value: Any = None):
        self.value_type = type(value)
        super().__init__(message)


class ExecutionError(TemplateError):
    """
    Raised when rendering a template fails.

    The original error is chained as __cause__ and also kept in the cause
    attribute.
    """

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Failed to execute template '{name}': {cause}")
