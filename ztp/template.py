"""
Template sets rendered with Jinja2 and a few additional functions.

A template set is built from a directory tree: every file of the tree becomes
a template named after its relative path, and all the templates share one
Jinja2 environment, so they can include, import and execute each other.

Example:
    template = (
        new_template()
        .set_logger(logging.getLogger("ztp"))
        .set_fs("templates")
        .set_dir("spoke")
        .build()
    )
    with open("manifest.json", "wb") as f:
        template.execute(f, "manifest.json", {"cluster": "spoke-1"})
"""

import io
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

import jinja2

from ztp.errors import (
    ConfigurationError,
    ExecutionError,
    FilesystemError,
    TemplateNotFoundError,
    TemplateSyntaxError,
)
from ztp.fs import DirectoryFS, SourceFS
from ztp.functions import build_functions

# Name of the variable that contains the input data inside templates.
DATA_VARIABLE = "data"


class UnitLoader(jinja2.BaseLoader):
    """
    Loader that serves the templates already compiled by the builder.

    Names are resolved when a template is executed, not when it is parsed, so
    templates can refer to templates that were parsed after them.
    """

    def __init__(self):
        self.units: Dict[str, jinja2.Template] = {}

    def load(self, environment, name, globals=None):
        unit = self.units.get(name)
        if unit is None:
            raise jinja2.TemplateNotFound(name)
        return unit


class TemplateBuilder:
    """
    Contains the data and logic needed to create templates. Don't create
    objects of this type directly, use the new_template function instead.
    """

    def __init__(self):
        self._logger: Optional[logging.Logger] = None
        self._fs: Optional[SourceFS] = None
        self._dir: Optional[str] = None

    def set_logger(self, value: logging.Logger) -> "TemplateBuilder":
        """Set the logger that the template will use to write messages. This is mandatory."""
        self._logger = value
        return self

    def set_fs(self, value: Union[SourceFS, str, Path]) -> "TemplateBuilder":
        """
        Set the filesystem that will be used to read the templates. This is
        mandatory. A string or path is used as a local directory.
        """
        if isinstance(value, (str, Path)):
            value = DirectoryFS(value)
        self._fs = value
        return self

    def set_dir(self, value: Optional[str]) -> "TemplateBuilder":
        """Load the templates only from the given directory. This is optional."""
        self._dir = value
        return self

    def build(self) -> "Template":
        """
        Use the configuration stored in the builder to create a new template.

        Returns:
            The template set, ready to be executed

        Raises:
            ConfigurationError: If the logger or the filesystem wasn't set
            FilesystemError: If the templates can't be found or read
            TemplateSyntaxError: If a template can't be parsed
        """
        if self._logger is None:
            raise ConfigurationError("logger is mandatory")
        if self._fs is None:
            raise ConfigurationError("filesystem is mandatory")

        fs = self._fs
        if self._dir:
            fs = fs.sub(self._dir)

        # The object is created early because some of the functions need it:
        template = Template(self._logger)
        names = template._find_files(fs)
        template._parse_files(fs, names)
        return template


def new_template() -> TemplateBuilder:
    """Create a builder that can then be used to create a template."""
    return TemplateBuilder()


class Template:
    """
    Set of Jinja2 templates with some additional functions. Don't create
    objects of this type directly, use the new_template function instead.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._names: List[str] = []
        self._loader = UnitLoader()
        self._env = jinja2.Environment(
            loader=self._loader,
            autoescape=False,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
            cache_size=0,
            auto_reload=False,
        )
        functions = build_functions(self._execute_func)
        self._env.globals.update(functions)
        self._env.filters.update(functions)
        # Input keys never hide the functions or the data variable.
        self._reserved = frozenset(functions) | {DATA_VARIABLE}

    def __repr__(self) -> str:
        return f"Template(names={self._names!r})"

    def _find_files(self, fs: SourceFS) -> List[str]:
        names = list(fs.walk())
        self._logger.debug(f"Found {len(names)} template files")
        return names

    def _parse_files(self, fs: SourceFS, names: List[str]) -> None:
        # Nothing is published until every file has been parsed.
        units: Dict[str, jinja2.Template] = {}
        for name in names:
            units[name] = self._parse_file(fs, name)
        self._loader.units.update(units)
        self._names = list(units)

    def _parse_file(self, fs: SourceFS, name: str) -> jinja2.Template:
        data = fs.read_bytes(name)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FilesystemError(f"Template file {name} is not valid UTF-8: {e}", path=name) from e

        try:
            code = self._env.compile(text, name, name)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateSyntaxError(name, e.message or str(e), e.lineno) from e
        unit = self._env.template_class.from_code(
            self._env, code, self._env.make_globals(None), None
        )

        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(f"Parsed template '{name}':\n{text}")
        return unit

    def _lookup(self, name: str) -> jinja2.Template:
        unit = self._loader.units.get(name)
        if unit is None:
            raise TemplateNotFoundError(name)
        return unit

    def _render(self, name: str, data: Any) -> str:
        unit = self._lookup(name)
        context: Dict[str, Any] = {}
        if isinstance(data, Mapping):
            context.update(
                (key, value)
                for key, value in data.items()
                if isinstance(key, str) and key not in self._reserved
            )
        context[DATA_VARIABLE] = data
        buffer = io.StringIO()
        for chunk in unit.generate(context):
            buffer.write(chunk)
        return buffer.getvalue()

    def _execute_func(self, name: str, data: Any = None) -> str:
        """
        Template function similar to include, but it returns the result
        instead of writing it to the output. That is useful when some
        processing is needed after that, for example, to encode the result
        using Base64:

            {{ execute("my.tmpl", data) | base64 }}
        """
        return self._render(name, data)

    def render(self, name: str, data: Any = None) -> bytes:
        """
        Execute the template with the given name and return the result.

        Args:
            name: Name of the template, the path relative to the root directory
            data: Input data, available in the template as the 'data' variable

        Returns:
            The rendered text encoded with UTF-8

        Raises:
            TemplateNotFoundError: If there is no template with that name
            ExecutionError: If rendering fails
        """
        self._lookup(name)
        try:
            text = self._render(name, data)
        except Exception as e:
            raise ExecutionError(name, e) from e

        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(f"Executed template '{name}' with data {data!r}:\n{text}")
        return text.encode("utf-8")

    def execute(self, writer: BinaryIO, name: str, data: Any = None) -> None:
        """
        Execute the template with the given name passing the given input data,
        and write the result to the given writer.

        The result is rendered into a buffer first, so the writer receives the
        complete output or nothing at all.

        Raises:
            TemplateNotFoundError: If there is no template with that name
            ExecutionError: If rendering fails
        """
        writer.write(self.render(name, data))

    def names(self) -> List[str]:
        """Return the names of the templates."""
        return list(self._names)
