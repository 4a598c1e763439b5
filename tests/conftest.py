"""Shared fixtures for cookiepm tests."""
import pytest

from cookiepm.environment import memory_environment
from cookiepm.manager import CookiePolicyManager


class FakeClock:
    """Controllable time source for cookie expiry."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def cookiepm_home(tmp_path, monkeypatch):
    """Isolate every test from the real home directory and environment.

    COOKIEPM_HOME points at a temporary profile, HOME at a temporary
    directory (so no global config is found) and the working directory
    holds no project config.
    """
    home = tmp_path / "home"
    home.mkdir()
    profile = tmp_path / "profile"

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("COOKIEPM_HOME", str(profile))
    for var in ("COOKIEPM_NAVIGATION", "COOKIEPM_IGNORE_URLS", "COOKIEPM_DEBUG"):
        monkeypatch.delenv(var, raising=False)

    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    return profile


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def env(clock):
    """In-memory environment with working durable storage."""
    return memory_environment("https://example.com/", clock=clock)


@pytest.fixture
def private_env(clock):
    """In-memory environment whose durable storage is blocked."""
    return memory_environment("https://example.com/", private=True, clock=clock)


@pytest.fixture
def manager(env):
    return CookiePolicyManager(env=env)
