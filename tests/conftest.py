"""Pytest configuration and shared fixtures."""
import logging
import os
import sys
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ztp.fs import MemoryFS
from ztp.template import new_template


@pytest.fixture
def logger():
    """Logger for the templates, outside the "ztp" hierarchy so that caplog sees its records."""
    return logging.getLogger("templates.tests")


@pytest.fixture
def build(logger):
    """Return a function that builds a template set from a dictionary of files."""

    def _build(files, directory=None):
        return new_template().set_logger(logger).set_fs(MemoryFS(files)).set_dir(directory).build()

    return _build
