"""Cookie policy manager.

Records explicit or implicit agreement with the cookie policy, runs queued
callbacks once there is an agreement, and optionally treats a second page
view as implicit agreement.

Usage::

    manager = CookiePolicyManager(
        {"navigation": True, "ignoreUrls": ["https://example.com/cookies"]},
        env=memory_environment("https://example.com/"),
    )
    manager.action(load_analytics)   # runs now, or once there is agreement
    if not manager.status().allowed:
        show_notice()
    manager.update("explicit", "close-button")
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from cookiepm.config import ManagerSettings
from cookiepm.environment import BrowserEnvironment, memory_environment
from cookiepm.errors import InvalidAgreementTypeError, InvalidCallbackError
from cookiepm.models import (
    AGREEMENT_KEY,
    AGREEMENT_TYPES,
    IMPLICIT,
    PAGEVIEW_KEY,
    AgreementStatus,
    AgreementValue,
    encode_types,
    normalize,
    strip_fragment,
)
from cookiepm.storage import ConsentStore, probe_storage

logger = logging.getLogger("cookiepm.manager")


class CookiePolicyManager:
    """Tracks one page's view of the user's cookie agreement.

    Args:
        options: Plain options mapping (``navigation``, ``ignoreUrls``).
            Ignored when ``settings`` is given.
        env: Browser capabilities; defaults to a fresh in-memory environment.
        settings: Already-built ManagerSettings.
    """

    def __init__(
        self,
        options: Any = None,
        *,
        env: Optional[BrowserEnvironment] = None,
        settings: Optional[ManagerSettings] = None,
    ):
        self.env = env or memory_environment()
        self.settings = settings or ManagerSettings.from_options(options)
        self.store = ConsentStore(self.env.local_storage, self.env.cookies)
        self._actions: list[Callable[[], Any]] = []

        if self.settings.navigation:
            self._check_navigation()

    # ── Public API ──

    def status(self) -> AgreementStatus:
        """Current agreement: is it allowed, and because of what."""
        return AgreementStatus.from_value(self.get_agreement_value())

    def action(self, callback: Callable[[], Any]) -> None:
        """Queue ``callback`` to run once there is an agreement.

        Runs it right away if the agreement already allows cookies.
        Registering the same callable twice has no effect.

        Raises:
            InvalidCallbackError: If ``callback`` is not callable.
        """
        if not callable(callback):
            raise InvalidCallbackError(callback)
        if not any(queued is callback for queued in self._actions):
            self._actions.append(callback)
            self._flush_if_allowed()

    def update(self, agreement_type: str, sub_type: str = "") -> bool:
        """Record the user's agreement.

        An ``implicit`` agreement never replaces an existing ``deny`` or
        ``explicit`` one; such updates are logged and dropped.

        Returns:
            False if an implicit agreement was ignored, else True.

        Raises:
            InvalidAgreementTypeError: If the type is not one of
                ``deny``, ``explicit`` or ``implicit``.
        """
        agreement_type = normalize(agreement_type)
        sub_type = normalize(sub_type)
        if agreement_type not in AGREEMENT_TYPES:
            raise InvalidAgreementTypeError(agreement_type, AGREEMENT_TYPES)

        prev = self.get_agreement_value()
        if agreement_type == IMPLICIT and prev.exists and prev.type != agreement_type:
            logger.info('Ignored implicit agreement. Current type: "%s"', prev.encode())
            written = False
        else:
            self.store.write_raw(AGREEMENT_KEY, encode_types(agreement_type, sub_type))
            logger.debug("Recorded agreement %s", encode_types(agreement_type, sub_type))
            written = True
        self._flush_if_allowed()
        return written

    def clear(self) -> None:
        """Remove the stored agreement and the page view marker.

        Queued callbacks stay queued.
        """
        self.store.clear_raw(AGREEMENT_KEY)
        session = self.env.session_storage
        if session is None:
            return
        try:
            session.remove_item(PAGEVIEW_KEY)
        except Exception as e:
            logger.debug("Could not clear session storage: %s", e)

    # ── Internals ──

    def get_agreement_value(self) -> AgreementValue:
        return AgreementValue.from_raw(self.store.read_raw(AGREEMENT_KEY))

    @property
    def pending_actions(self) -> int:
        return len(self._actions)

    def _flush_if_allowed(self) -> None:
        if not self.get_agreement_value().allowed:
            return
        # Dequeue before calling: a raising callback never runs twice
        while self._actions:
            callback = self._actions.pop(0)
            callback()

    def _check_navigation(self) -> None:
        """Detect a second page view and record the current URL.

        Fragments are stripped before URLs are compared.
        """
        session = self.env.session_storage
        if not probe_storage(session) or self.get_agreement_value().exists:
            return

        href = self.env.location.href
        url = strip_fragment(href)
        prev = strip_fragment(session.get_item(PAGEVIEW_KEY) or "")
        ignore = [strip_fragment(u) for u in self.settings.ignore_urls]

        if prev != "" and prev != url and url not in ignore:
            self.update(IMPLICIT, "navigation")
            session.remove_item(PAGEVIEW_KEY)
        else:
            session.set_item(PAGEVIEW_KEY, href)
