"""Manager settings and layered configuration for cookiepm.

Priority (highest to lowest):
1. Environment variables (COOKIEPM_*)
2. Config file ``[manager]`` table (explicit path, ``.cookiepm.toml`` in the
   current directory, or ``~/.config/cookiepm/config.toml``)
3. Built-in defaults
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from cookiepm.errors import ConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger("cookiepm.config")

# Option spellings accepted by ManagerSettings.from_options
OPTION_ALIASES = {
    "navigation": "navigation",
    "ignore_urls": "ignore_urls",
    "ignoreUrls": "ignore_urls",
}

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class ManagerSettings:
    """Options recognized by CookiePolicyManager."""

    # Treat a second, different page view as implicit agreement
    navigation: bool = False

    # URLs that never count as that second page view
    ignore_urls: list[str] = field(default_factory=list)

    @classmethod
    def from_options(cls, options: Any = None) -> ManagerSettings:
        """Merge a plain options mapping over the defaults.

        Unknown keys and values whose type differs from the default are
        ignored, leaving the default in place.
        """
        settings = cls()
        if not isinstance(options, Mapping):
            return settings
        for key, value in options.items():
            name = OPTION_ALIASES.get(key)
            if name is None:
                logger.debug("Ignoring unknown option %r", key)
                continue
            if not _matches_default(getattr(settings, name), value):
                logger.debug("Ignoring option %r: unexpected %s", key, type(value).__name__)
                continue
            setattr(settings, name, list(value) if name == "ignore_urls" else value)
        return settings

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _matches_default(default: Any, value: Any) -> bool:
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, list):
        return (
            isinstance(value, (list, tuple))
            and all(isinstance(item, str) for item in value)
        )
    return isinstance(value, type(default))


# ── Paths ──

def global_config_dir() -> Path:
    """Return the global config directory: ~/.config/cookiepm/."""
    return Path.home() / ".config" / "cookiepm"


def global_config_path() -> Path:
    return global_config_dir() / "config.toml"


def project_config_path() -> Path:
    """Return the project config file path (.cookiepm.toml in cwd)."""
    return Path.cwd() / ".cookiepm.toml"


def get_profile_dir() -> Path:
    """Directory holding the on-disk browser profile used by the CLI."""
    env_home = os.environ.get("COOKIEPM_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return global_config_dir() / "profile"


# ── Loading ──

def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _parse_bool(env_var: str, raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    logger.warning("Ignoring %s=%r: expected a boolean", env_var, raw)
    return None


def _env_options() -> dict:
    options: dict[str, Any] = {}
    navigation = os.environ.get("COOKIEPM_NAVIGATION")
    if navigation:
        parsed = _parse_bool("COOKIEPM_NAVIGATION", navigation)
        if parsed is not None:
            options["navigation"] = parsed
    ignore = os.environ.get("COOKIEPM_IGNORE_URLS")
    if ignore:
        options["ignore_urls"] = [url.strip() for url in ignore.split(",") if url.strip()]
    return options


def load_settings(config_path: Optional[Path] = None) -> ManagerSettings:
    """Resolve ManagerSettings from config file and environment.

    Raises:
        ConfigError: If an explicit ``config_path`` does not exist.
    """
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(
                f"Config file not found: {config_path}",
                context={"path": str(config_path)},
            )
        candidates = [config_path]
    else:
        candidates = [project_config_path(), global_config_path()]

    options: dict[str, Any] = {}
    for path in candidates:
        table = _read_toml(path).get("manager")
        if isinstance(table, dict):
            logger.debug("Loaded manager settings from %s", path)
            options = dict(table)
            break

    options.update(_env_options())
    return ManagerSettings.from_options(options)
