"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

# Insert local src directory at the beginning of sys.path
# This ensures that the local covcompare package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of covcompare modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("covcompare"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep the user's global config and COVCOMPARE__ env vars out of tests."""
    from covcompare.config import loader

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(loader, "GLOBAL_CONFIG_PATH", home / "config.yaml")
    for key in list(os.environ):
        if key.upper().startswith("COVCOMPARE__"):
            monkeypatch.delenv(key)
    yield
    # CLI invocations install handlers bound to CliRunner streams
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
