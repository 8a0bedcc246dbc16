"""
Pytest configuration for the catalog client test suite.

This module configures the Python path so tests can import the catalog
package from the src directory without installing it, and provides shared
fixtures for stubbed servers.
"""
import logging
import sys
from pathlib import Path

import pytest

# Add project root to Python path so tests can import the tests.helpers module
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Also add src directory explicitly so `import catalog` works uninstalled
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from catalog.storage import MemoryStore  # noqa: E402

from tests.helpers import SERVER_URL, StubServer  # noqa: E402


@pytest.fixture
def store():
    """Empty in-memory session store."""
    return MemoryStore()


@pytest.fixture
def server_url():
    return SERVER_URL


@pytest.fixture
def stub_server():
    """StubServer with no routes; tests add routes as needed."""
    return StubServer()


@pytest.fixture(autouse=True)
def reset_catalog_logger():
    """Detach handlers added by setup_logging() so tests stay independent."""
    yield
    catalog_logger = logging.getLogger("catalog")
    for handler in list(catalog_logger.handlers):
        catalog_logger.removeHandler(handler)
        handler.close()
    catalog_logger.setLevel(logging.NOTSET)
