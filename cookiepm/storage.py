"""Storage backends and the consent store.

Three kinds of browser state are modelled here:

- key-value storage (durable ``localStorage`` or per-session
  ``sessionStorage``), anything with ``get_item``/``set_item``/``remove_item``
- a document-cookie jar, written with ``name=value;max-age=N`` assignments
  and read back as a ``name=value; name2=value2`` string
- the ``ConsentStore``, which prefers durable storage and falls back to a
  cookie when durable storage is blocked (e.g. private browsing)
"""
from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional, Protocol
from urllib.parse import quote, unquote

import yaml

logger = logging.getLogger("cookiepm.storage")

PROBE_KEY = "cpm-test"

# One week tops for the cookie fallback
COOKIE_MAX_AGE = 7 * 24 * 3600


class KeyValueStorage(Protocol):
    """Subset of the Web Storage API the manager relies on."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


# ── Key-Value Backends ─────────────────────────────────────────────

class MemoryStorage:
    """Dict-backed storage, the default for tests and embedding."""

    def __init__(self, data: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(data or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class BlockedStorage:
    """Storage that refuses every access, as in a private window."""

    def __init__(self, reason: str = "storage is disabled"):
        self.reason = reason

    def get_item(self, key: str) -> Optional[str]:
        raise PermissionError(self.reason)

    def set_item(self, key: str, value: str) -> None:
        raise PermissionError(self.reason)

    def remove_item(self, key: str) -> None:
        raise PermissionError(self.reason)


def _atomic_dump(data: dict, path: Path) -> None:
    """Write a YAML mapping to ``path`` via a temp file and rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", dir=path.parent, delete=False) as tf:
        yaml.safe_dump(data, tf, default_flow_style=False, sort_keys=True)
        temp_name = tf.name

    try:
        os.replace(temp_name, path)
    except Exception:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


def _load_mapping(path: Path) -> dict:
    if not path.is_file():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


class FileStorage:
    """Key-value storage persisted as a YAML mapping on disk.

    The file is re-read on every access so several managers (or processes)
    sharing a profile see each other's writes; the last writer wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        value = _load_mapping(self.path).get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str) -> None:
        data = _load_mapping(self.path)
        data[key] = str(value)
        _atomic_dump(data, self.path)

    def remove_item(self, key: str) -> None:
        data = _load_mapping(self.path)
        if key in data:
            del data[key]
            _atomic_dump(data, self.path)


# ── Cookie Jar ─────────────────────────────────────────────────────

def parse_cookie_assignment(assignment: str) -> tuple[str, str, Optional[int]]:
    """Parse ``name=value;max-age=N`` into ``(name, value, max_age)``.

    Attributes other than ``max-age`` are accepted and ignored.
    """
    pair, *attributes = assignment.split(";")
    name, _, value = pair.partition("=")
    max_age = None
    for attr in attributes:
        attr_name, _, attr_value = attr.partition("=")
        if attr_name.strip().lower() == "max-age":
            try:
                max_age = int(attr_value.strip())
            except ValueError:
                logger.debug("Ignoring bad max-age in cookie %r", name.strip())
    return name.strip(), value.strip(), max_age


class CookieJar:
    """In-memory document-cookie jar.

    Cookies written with a ``max-age`` expire against ``clock``; a
    ``max-age`` of zero or less deletes the cookie immediately.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._cookies: dict[str, dict] = {}

    def _load(self) -> dict[str, dict]:
        return self._cookies

    def _save(self, cookies: dict[str, dict]) -> None:
        self._cookies = cookies

    def _live(self) -> dict[str, dict]:
        now = self._clock()
        cookies = self._load()
        live = {
            name: cookie for name, cookie in cookies.items()
            if cookie.get("expires") is None or cookie["expires"] > now
        }
        if len(live) != len(cookies):
            self._save(live)
        return live

    def read(self) -> str:
        """Return the ``name=value; ...`` string of unexpired cookies."""
        return "; ".join(
            f"{name}={cookie['value']}" for name, cookie in self._live().items()
        )

    def write(self, assignment: str) -> None:
        """Apply one ``name=value;attr=...`` assignment."""
        name, value, max_age = parse_cookie_assignment(assignment)
        if not name:
            return
        cookies = dict(self._live())
        if max_age is not None and max_age <= 0:
            cookies.pop(name, None)
        else:
            expires = None if max_age is None else self._clock() + max_age
            cookies[name] = {"value": value, "expires": expires}
        self._save(cookies)


class FileCookieJar(CookieJar):
    """Cookie jar persisted as YAML, with absolute expiry timestamps."""

    def __init__(self, path: Path, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self.path = Path(path)

    def _load(self) -> dict[str, dict]:
        return {
            str(name): cookie for name, cookie in _load_mapping(self.path).items()
            if isinstance(cookie, dict) and "value" in cookie
        }

    def _save(self, cookies: dict[str, dict]) -> None:
        _atomic_dump(cookies, self.path)


# ── Probing ────────────────────────────────────────────────────────

def probe_storage(storage: Optional[KeyValueStorage]) -> bool:
    """Check that ``storage`` accepts a write and a delete."""
    if storage is None:
        return False
    try:
        storage.set_item(PROBE_KEY, PROBE_KEY)
        storage.remove_item(PROBE_KEY)
        return True
    except Exception as e:
        logger.debug("%s is not usable: %s", type(storage).__name__, e)
        return False


# ── Consent Store ──────────────────────────────────────────────────

class ConsentStore:
    """Read and write raw values, preferring durable storage.

    When durable storage is unusable the value goes to a cookie instead,
    percent-encoded, for at most ``COOKIE_MAX_AGE`` seconds. Storage
    failures never reach the caller.
    """

    def __init__(self, local: Optional[KeyValueStorage], cookies: CookieJar):
        self._local = local
        self._cookies = cookies
        self._local_usable: Optional[bool] = probe_storage(local)

    def refresh(self) -> None:
        """Forget the cached probe result; the next access probes again."""
        self._local_usable = None

    def _use_local(self) -> bool:
        if not isinstance(self._local_usable, bool):
            self._local_usable = probe_storage(self._local)
        return self._local_usable

    def _local_failed(self, e: Exception) -> None:
        logger.debug("Durable storage failed, falling back to cookie: %s", e)
        self._local_usable = False

    @property
    def backend(self) -> str:
        """Name of the backend currently in use: ``local`` or ``cookie``."""
        return "local" if self._use_local() else "cookie"

    def read_raw(self, key: str) -> Optional[str]:
        if self._use_local():
            try:
                return self._local.get_item(key)
            except Exception as e:
                self._local_failed(e)
        return self._read_cookie(key)

    def write_raw(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``; an empty value deletes it."""
        if self._use_local():
            try:
                if value == "":
                    self._local.remove_item(key)
                else:
                    self._local.set_item(key, value)
                return
            except Exception as e:
                self._local_failed(e)
        if value == "":
            self._write_cookie(f"{key}=;max-age=0")
        else:
            self._write_cookie(f"{key}={quote(value, safe='')};max-age={COOKIE_MAX_AGE}")

    def clear_raw(self, key: str) -> None:
        self.write_raw(key, "")

    def _write_cookie(self, assignment: str) -> None:
        try:
            self._cookies.write(assignment)
        except Exception as e:
            logger.debug("Cookie storage failed, value dropped: %s", e)

    def _read_cookie(self, key: str) -> Optional[str]:
        try:
            cookies = self._cookies.read()
        except Exception as e:
            logger.debug("Cookie storage unreadable, no record: %s", e)
            return None
        for part in cookies.split(";"):
            name, sep, value = part.strip().partition("=")
            if sep and name == key:
                return unquote(value) or None
        return None
