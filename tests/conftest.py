"""Shared pytest fixtures for SCRU64 tests."""

from __future__ import annotations

import importlib

import pytest

from scru64.config import ENV_NODE_SPEC, ENV_ROLLBACK_ALLOWANCE
from scru64.global_generator import GlobalGenerator
from tests.factories import FakeClock, FixedCounterMode

# the package re-exports the holder instance under the submodule's name
global_generator_module = importlib.import_module("scru64.global_generator")


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a clock frozen at 2020-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def fixed_counter_mode() -> FixedCounterMode:
    """Create a counter mode that always renews the counter to zero."""
    return FixedCounterMode(0)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove SCRU64 configuration variables from the environment."""
    monkeypatch.delenv(ENV_NODE_SPEC, raising=False)
    monkeypatch.delenv(ENV_ROLLBACK_ALLOWANCE, raising=False)
    return monkeypatch


@pytest.fixture
def isolated_global_generator(monkeypatch: pytest.MonkeyPatch) -> GlobalGenerator:
    """Replace the process-wide holder with a fresh, uninitialized one."""
    holder = GlobalGenerator()
    monkeypatch.setattr(global_generator_module, "global_generator", holder)
    return holder
