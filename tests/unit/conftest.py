"""
Pytest configuration and fixtures for unit tests.

Unit tests never spawn real processes: subprocess.Popen is patched for every
test, and tests that exercise ProcessExecutor configure the mock themselves.
"""

from typing import Any, Dict, Generator
from unittest.mock import patch

import pytest

from flotilla.core import config


@pytest.fixture(autouse=True)
def patch_dangerous_operations() -> Generator[Dict[str, Any], None, None]:
    """Patch process creation during unit tests."""
    with patch("subprocess.Popen") as mock_popen, patch("os.kill") as mock_kill:
        mock_popen.return_value.communicate.return_value = ("", "")
        mock_popen.return_value.returncode = 0
        mock_popen.return_value.pid = 4242
        yield {"popen": mock_popen, "kill": mock_kill}


@pytest.fixture(autouse=True)
def reset_global_config() -> Generator[None, None, None]:
    """Drop any configuration cached by the global config manager."""
    yield
    config._config_manager._config = None
