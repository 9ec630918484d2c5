"""
Root-level shared test fixtures.

Inherited by every test suite under opclient/.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove OPCLIENT_* env vars that leak between tests."""
    for key in [
        "OPCLIENT_CONFIG_FILE",
        "OPCLIENT_EXECUTABLE",
        "OPCLIENT_BIN_DIR",
        "OPCLIENT_SESSION_LEASE_MINUTES",
        "OPCLIENT_COMMAND_TIMEOUT",
        "OPCLIENT_PERSON_AVATAR",
        "OPCLIENT_VAULT_AVATAR",
    ]:
        monkeypatch.delenv(key, raising=False)
