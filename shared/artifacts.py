"""
Per-test browser artifacts: traces and video recordings.

The ``TRACE`` and ``VIDEO`` settings share three modes: ``on`` keeps the
artifact of every test, ``retain-on-failure`` records every test but keeps
only the artifacts of failed ones, and ``off`` records nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from playwright.sync_api import BrowserContext, Video

logger = logging.getLogger(__name__)


def should_record(mode: str) -> bool:
    return mode != "off"


def should_keep(mode: str, failed: bool) -> bool:
    """Return True when an artifact recorded under ``mode`` must be kept."""
    return mode == "on" or (mode == "retain-on-failure" and failed)


def video_context_args(mode: str, artifacts_dir: Path) -> dict[str, Any]:
    """Return the ``new_context`` arguments that enable recording for ``mode``."""
    if not should_record(mode):
        return {}
    return {"record_video_dir": str(artifacts_dir / "videos")}


def track_videos(context: BrowserContext) -> list[Video]:
    """
    Collect the video handle of every page opened in ``context`` from now on.

    Handles must be gathered as pages open: closed pages drop out of
    ``context.pages`` before the context itself is closed.
    """
    videos: list[Video] = []

    def _on_page(page) -> None:
        if page.video is not None:
            videos.append(page.video)

    context.on("page", _on_page)
    return videos


def discard_videos(videos: Iterable[Video]) -> None:
    """Delete recorded video files.  Call only after the context is closed."""
    for video in videos:
        path = Path(video.path())
        path.unlink(missing_ok=True)
        logger.debug("Discarded video %s", path)
