"""
ztp - A Python library for rendering cluster bootstrap manifests from a directory of templates.
"""

from ztp.template import Template, TemplateBuilder, new_template
from ztp.fs import SourceFS, DirectoryFS, MemoryFS
from ztp.functions import base64_func, json_func
from ztp.config import Config, config
from ztp.errors import (
    TemplateError,
    ConfigurationError,
    FilesystemError,
    TemplateSyntaxError,
    TemplateNotFoundError,
    UnsupportedTypeError,
    SerializationError,
    ExecutionError,
)

__all__ = [
    "Template",
    "TemplateBuilder",
    "new_template",
    "SourceFS",
    "DirectoryFS",
    "MemoryFS",
    "base64_func",
    "json_func",
    "Config",
    "config",
    "TemplateError",
    "ConfigurationError",
    "FilesystemError",
    "TemplateSyntaxError",
    "TemplateNotFoundError",
    "UnsupportedTypeError",
    "SerializationError",
    "ExecutionError",
]

__version__ = "0.1.0"
