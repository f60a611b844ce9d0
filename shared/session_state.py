"""
Cached authenticated browser sessions.

Logging into OrangeHRM through the UI costs several seconds per test.
:class:`SessionStateCache` saves the cookies and local storage of a
logged-in browser context to a JSON file (Playwright's native
``storage_state`` format) and rebuilds new contexts from it on later
runs.  A cached state is trusted only after a probe proves it still
reaches the authenticated landing page; anything short of that, whether
an unreadable file, a rejected context or an expired session, discards
the file entirely and falls back to one interactive login.

The state file is shared by every test worker and is not locked: the
last worker to log in wins.  Writes go through a temporary file and
``os.replace`` so readers see either the old or the new snapshot.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from playwright.sync_api import Browser, BrowserContext
from playwright.sync_api import Error as PlaywrightError

from shared.test_data import Credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthTarget:
    """
    Where and how to log in, and how to recognise a logged-in page.

    Attributes:
        base_url: Root URL of the application.
        login_path: Path of the login form.
        landing_path: Protected path that only renders when authenticated.
        authenticated_marker: Selector visible only to a logged-in user.
        username_field: Selector of the username input.
        password_field: Selector of the password input.
        submit_button: Selector of the login button.
        timeout_ms: Upper bound for the probe and the post-login wait.
    """

    base_url: str
    login_path: str
    landing_path: str
    authenticated_marker: str
    username_field: str
    password_field: str
    submit_button: str
    timeout_ms: int = 10000

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"


class SessionStateCache:
    """
    Persist and reuse authenticated browser contexts, one file per identity.

    Args:
        state_dir: Directory holding ``<identity>-auth.json`` files.
        target: Login form and authenticated-marker description.
        context_args: Extra keyword arguments for ``browser.new_context``.
    """

    def __init__(
        self,
        state_dir: str | Path,
        target: AuthTarget,
        context_args: dict[str, Any] | None = None,
    ):
        self.state_dir = Path(state_dir)
        self.target = target
        self.context_args = dict(context_args or {})

    def state_path(self, identity: str) -> Path:
        """Return the file that stores the session for ``identity``."""
        return self.state_dir / f"{identity}-auth.json"

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def load_or_create_session(
        self, browser: Browser, identity: str, credentials: Credentials
    ) -> BrowserContext:
        """
        Return a browser context that is logged in as ``identity``.

        The stored session is reused when it passes the authentication
        probe; otherwise it is deleted and a fresh interactive login is
        performed and saved.

        Args:
            browser: Browser used to create contexts.
            identity: Key of the stored session, e.g. ``"admin"``.
            credentials: Used only when a fresh login is needed.

        Returns:
            An authenticated context.  The caller owns it and must close it.

        Raises:
            playwright.sync_api.Error: If the fresh login does not reach the
                authenticated marker.  Not retried here.
        """
        context = self._restore(browser, identity)
        if context is not None:
            logger.info("Reusing stored session for %s", identity)
            return context
        return self.login_and_save(browser, identity, credentials)

    def login_and_save(
        self, browser: Browser, identity: str, credentials: Credentials
    ) -> BrowserContext:
        """Log in through the UI and overwrite the stored session."""
        logger.info("Performing interactive login for %s", identity)
        context = browser.new_context(**self.context_args)
        try:
            page = context.new_page()
            page.goto(self.target.url(self.target.login_path))
            page.fill(self.target.username_field, credentials.identifier)
            page.fill(self.target.password_field, credentials.secret)
            page.click(self.target.submit_button)
            page.locator(self.target.authenticated_marker).wait_for(
                state="visible", timeout=self.target.timeout_ms
            )
            self._write_state(identity, context.storage_state())
            page.close()
        except BaseException:
            context.close()
            raise
        return context

    def discard(self, identity: str) -> None:
        """Delete the stored session for ``identity`` if there is one."""
        self.state_path(identity).unlink(missing_ok=True)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _restore(self, browser: Browser, identity: str) -> BrowserContext | None:
        path = self.state_path(identity)
        if not path.exists():
            logger.info("No stored session for %s", identity)
            return None

        state = self._read_state(path)
        if state is None:
            logger.info("Stored session for %s is unreadable, discarding", identity)
            self.discard(identity)
            return None

        try:
            context = browser.new_context(storage_state=state, **self.context_args)
        except PlaywrightError as exc:
            logger.info("Stored session for %s was rejected: %s", identity, exc)
            self.discard(identity)
            return None

        if self._probe(context):
            return context

        logger.info("Stored session for %s has expired, discarding", identity)
        context.close()
        self.discard(identity)
        return None

    def _probe(self, context: BrowserContext) -> bool:
        page = None
        try:
            page = context.new_page()
            page.goto(self.target.url(self.target.landing_path))
            page.locator(self.target.authenticated_marker).wait_for(
                state="visible", timeout=self.target.timeout_ms
            )
        except PlaywrightError:
            return False
        finally:
            if page is not None:
                page.close()
        return True

    @staticmethod
    def _read_state(path: Path) -> dict[str, Any] | None:
        try:
            state = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(state, dict) or not isinstance(state.get("cookies"), list):
            return None
        return state

    def _write_state(self, identity: str, state: dict[str, Any]) -> None:
        path = self.state_path(identity)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{identity}-", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state, handle, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved session for %s to %s", identity, path)
