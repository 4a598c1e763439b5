"""Browser capabilities the manager depends on, bundled for injection."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from cookiepm.storage import (
    BlockedStorage,
    CookieJar,
    FileCookieJar,
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
)

logger = logging.getLogger("cookiepm.environment")

LOCAL_FILE = "local.yaml"
SESSION_FILE = "session.yaml"
COOKIES_FILE = "cookies.yaml"


@dataclass
class Location:
    """Current page location."""

    href: str = "about:blank"


@dataclass
class BrowserEnvironment:
    """Storage backends and location of one page load.

    ``session_storage`` may be ``None`` when the host offers no
    session-scoped storage at all.
    """

    local_storage: KeyValueStorage
    cookies: CookieJar
    session_storage: Optional[KeyValueStorage] = None
    location: Location = field(default_factory=Location)


def memory_environment(
    url: str = "about:blank",
    private: bool = False,
    session: bool = True,
    clock: Callable[[], float] = time.time,
) -> BrowserEnvironment:
    """Build a throwaway in-memory environment.

    Args:
        url: Current page URL.
        private: Block durable storage, forcing the cookie fallback.
        session: Provide session-scoped storage.
        clock: Time source for cookie expiry.
    """
    return BrowserEnvironment(
        local_storage=BlockedStorage() if private else MemoryStorage(),
        cookies=CookieJar(clock),
        session_storage=MemoryStorage() if session else None,
        location=Location(url),
    )


def profile_environment(
    profile_dir: Path,
    url: str = "about:blank",
    private: bool = False,
) -> BrowserEnvironment:
    """Build an environment persisted under ``profile_dir``.

    Durable storage lives in ``local.yaml``, session storage in
    ``session.yaml`` and cookies in ``cookies.yaml``.
    """
    profile_dir = Path(profile_dir)
    local: KeyValueStorage
    if private:
        local = BlockedStorage("durable storage is blocked in private mode")
    else:
        local = FileStorage(profile_dir / LOCAL_FILE)
    return BrowserEnvironment(
        local_storage=local,
        cookies=FileCookieJar(profile_dir / COOKIES_FILE),
        session_storage=FileStorage(profile_dir / SESSION_FILE),
        location=Location(url),
    )


def end_session(profile_dir: Path) -> bool:
    """Discard the session-scoped storage of a profile.

    Returns True if there was session data to remove.
    """
    path = Path(profile_dir) / SESSION_FILE
    if not path.exists():
        return False
    path.unlink()
    logger.info("Ended browser session for %s", profile_dir)
    return True
