"""
Configuration file for pytest.

This file defines shared fixtures for the test suite. Earth Engine is never
contacted: tests replace the ``ee`` module inside the module under test with
a ``MagicMock``.
"""

import os
import pathlib
import tempfile

import matplotlib
import pytest

matplotlib.use("Agg")
os.environ.setdefault("MPLBACKEND", "Agg")


@pytest.fixture(scope="function")
def temp_dir():
    """
    Pytest fixture to create a temporary directory for a test function.

    Yields:
        pathlib.Path: The path to the created temporary directory.
    """
    with tempfile.TemporaryDirectory(prefix="hurricaneviewer_test_") as tmpdir:
        yield pathlib.Path(tmpdir)


@pytest.fixture(scope="session")
def project_root():
    """Root directory of the project (one level above ``tests``)."""
    return pathlib.Path(__file__).parent.parent


@pytest.fixture
def default_config_data():
    """A validated copy of the built-in configuration dictionary."""
    from hurricaneviewer.utils import config

    return config._deep_merge(config.DEFAULTS, {})


@pytest.fixture
def viewer_config(default_config_data, temp_dir):
    """The default Hurricane Maria configuration writing into ``temp_dir``."""
    from hurricaneviewer.core.configuration import build_viewer_config

    default_config_data["output_dir"] = str(temp_dir)
    return build_viewer_config(default_config_data)
