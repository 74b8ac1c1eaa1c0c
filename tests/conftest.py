"""
Global test configuration fixtures for NLS resolver tests.

This module provides fixtures that lay out a test installation under
``tmp_path`` and keep the developer environment from leaking into tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from nls_resolver.config.schema import ResolverConfig
from tests.utils.test_helpers import NLSEnvironment, create_nls_environment


@pytest.fixture
def nls_env(tmp_path: Path) -> NLSEnvironment:
    """
    Create a default catalog and a French pack file; no manifest yet.

    Returns:
        NLSEnvironment rooted at ``tmp_path``
    """
    return create_nls_environment(tmp_path)


@pytest.fixture
def resolver_config() -> ResolverConfig:
    """Default resolver settings."""
    return ResolverConfig()


@pytest.fixture(autouse=True)
def clear_dev_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure a developer's environment does not force default messages."""
    monkeypatch.delenv("VSCODE_DEV", raising=False)
