"""Reachability checks for the public demo sites used by the E2E suites."""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)


def is_site_reachable(url: str, timeout: int = 5) -> bool:
    """Return True when ``url`` answers with a non-5xx status."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Site %s is not reachable: %s", url, exc)
        return False
    return response.status_code < 500


def wait_for_site_reachable(url: str, timeout: int = 30, interval: int = 2) -> None:
    """Poll ``url`` until it responds or ``timeout`` seconds pass."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if is_site_reachable(url, timeout=min(interval * 2, 10)):
            return
        time.sleep(interval)
    raise RuntimeError(f"Site at {url} not reachable after {timeout}s")
