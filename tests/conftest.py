"""Shared fixtures for unit and integration tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from context7_relay.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

MCP_URL = "https://mcp.context7.test/mcp"
API_BASE = "https://context7.test/api/v1"


@pytest.fixture()
def settings() -> Settings:
    """Settings pointing both tiers at hosts that only respx answers."""
    return Settings(
        upstream={"mcp_url": MCP_URL, "api_base": API_BASE, "api_key": "test-key"},
        docs={"min_tokens": 1000, "default_tokens": 5000},
    )


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for running the server as a subprocess.

    Drops any relay configuration inherited from the developer's shell and
    points the config directories at an empty temp dir so no YAML file is found.
    """
    env = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith("CONTEXT7") and key != "MCP_TRANSPORT"
    }
    env["HOME"] = str(tmp_path)
    env["XDG_CONFIG_HOME"] = str(tmp_path / "config")
    # Upstreams are unreachable; nothing in these tests should hit the network.
    env["CONTEXT7_RELAY__UPSTREAM__MCP_URL"] = "http://127.0.0.1:9/mcp"
    env["CONTEXT7_RELAY__UPSTREAM__API_BASE"] = "http://127.0.0.1:9/api/v1"
    return env
