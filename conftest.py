"""Shared pytest fixtures."""

import pytest

from config import EngineSettings
from jinx.toolchain import CompilerToolchain, reset_default_toolchain


@pytest.fixture(autouse=True)
def fresh_default_toolchain():
    """Each test starts without a process-wide toolchain."""
    reset_default_toolchain()
    yield
    reset_default_toolchain()


@pytest.fixture
def engine_settings():
    return EngineSettings()


@pytest.fixture
def toolchain(engine_settings):
    return CompilerToolchain(settings=engine_settings)
