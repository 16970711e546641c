"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from core.config import AppSettings

_UNPREFIXED = (
    "GODADDY_API_KEY",
    "GODADDY_API_SECRET",
    "DATABASE_URL",
    "NODE_ENV",
    "CNAME_TARGET",
    "RAILWAY_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the operator's shell and project .env."""

    for name in list(os.environ):
        if name.startswith("DEPLOY_OPS_") or name in _UNPREFIXED:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_settings(monkeypatch: pytest.MonkeyPatch) -> Callable[..., AppSettings]:
    """Build settings from environment variables, as the CLI does."""

    def _make(**env: str) -> AppSettings:
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return AppSettings(_env_file=None)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., AppSettings]) -> AppSettings:
    return make_settings(
        GODADDY_API_KEY="test-key-1234",
        GODADDY_API_SECRET="test-secret",
        DEPLOY_OPS_DOMAIN="example.io",
        CNAME_TARGET="example-production.up.railway.app",
        DEPLOY_OPS_HTTP_MAX_RETRIES="2",
    )


