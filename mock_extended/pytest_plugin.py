"""pytest fixtures for mock-extended.

Load them from a conftest.py::

    pytest_plugins = ["mock_extended.pytest_plugin"]
"""

import pytest

from mock_extended.config import MockExtended


@pytest.fixture
def mock_extended_config():
    """Yield the configuration entry point, restoring defaults afterwards."""
    yield MockExtended
    MockExtended.reset_config()
