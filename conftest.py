"""Pytest configuration.

Ensures local packages can be imported consistently during test collection.
"""

import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    resolved = str(path.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


REPO_ROOT = Path(__file__).resolve().parent

# Allow importing `src.*` package explicitly.
_prepend_sys_path(REPO_ROOT)


@pytest.fixture
def sync_env():
    """A complete set of environment variables for `SyncSettings.from_env`."""
    return {
        "NETSUITE_ACCOUNT_ID": "1234567_SB1",
        "NETSUITE_CONSUMER_KEY": "test_consumer_key",
        "NETSUITE_CONSUMER_SECRET": "test_consumer_secret",
        "NETSUITE_TOKEN_ID": "test_token_id",
        "NETSUITE_TOKEN_SECRET": "test_token_secret",
        "HUBSPOT_ACCESS_TOKEN": "pat-na1-test",
    }


@pytest.fixture
def netsuite_credentials():
    from src.arsync.config.settings import NetSuiteCredentials

    return NetSuiteCredentials(
        account_id="1234567_SB1",
        consumer_key="ck",
        consumer_secret="cs",
        token_id="tid",
        token_secret="ts",
    )
