"""
Test-run configuration.

Each target environment is a profile class holding defaults; subclasses
override only what differs, following the usual ``Config`` hierarchy.
:func:`load_config` resolves the profile named by the ``ENV`` variable,
applies environment-variable overrides and freezes the result into an
:class:`EnvironmentConfig` value.  The value is built once by the test
session and handed to every fixture that needs it; nothing in the suite
reads a module-level singleton.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from shared.test_data import Credentials

logger = logging.getLogger(__name__)

SCREENSHOT_MODES = ("on", "only-on-failure", "off")
RECORDING_MODES = ("on", "retain-on-failure", "off")


class Config:
    """Defaults shared by every environment."""

    BASE_URL: str = "https://opensource-demo.orangehrmlive.com"
    API_URL: str = "https://opensource-demo.orangehrmlive.com/web/index.php/api/v2"
    SAUCEDEMO_URL: str = "https://www.saucedemo.com/v1"
    USERNAME: str = "Admin"
    PASSWORD: str = "admin123"
    TIMEOUT_MS: int = 30000
    HEADLESS: bool = True
    SLOW_MO_MS: int = 0
    SCREENSHOT: str = "only-on-failure"
    VIDEO: str = "retain-on-failure"
    TRACE: str = "retain-on-failure"

    # Settings the environment may not override for this profile
    LOCKED: tuple[str, ...] = ()


class DevConfig(Config):
    """Local runs against the public demo."""


class StagingConfig(Config):
    """Slower timeouts and full artifact capture."""

    TIMEOUT_MS: int = 45000
    SCREENSHOT: str = "on"
    VIDEO: str = "on"
    TRACE: str = "on"


class ProductionConfig(Config):
    """Conservative settings: long timeouts, no recordings."""

    TIMEOUT_MS: int = 60000
    SCREENSHOT: str = "only-on-failure"
    VIDEO: str = "off"
    TRACE: str = "off"
    LOCKED = ("SCREENSHOT", "VIDEO", "TRACE")


class CIConfig(Config):
    """Pipelines always run headless and at full speed."""

    TIMEOUT_MS: int = 60000
    LOCKED = ("HEADLESS", "SLOW_MO_MS")


config = {
    "dev": DevConfig,
    "staging": StagingConfig,
    "production": ProductionConfig,
    "ci": CIConfig,
    "default": DevConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Resolve a profile class by environment name.

    Args:
        env: ``dev``, ``staging``, ``production`` or ``ci``.  When ``None``
            the ``ENV`` environment variable is consulted, falling back to
            ``dev``.

    Returns:
        The profile class.  Unknown names resolve to ``DevConfig``.
    """
    if env is None:
        env = os.environ.get("ENV", "dev")
    return config.get(env, config["default"])


@dataclass(frozen=True)
class EnvironmentConfig:
    """Resolved, immutable settings for one test run."""

    name: str
    base_url: str
    api_url: str
    saucedemo_url: str
    username: str
    password: str
    timeout_ms: int
    headless: bool
    slow_mo_ms: int
    screenshot: str
    video: str
    trace: str
    auth_state_dir: Path
    artifacts_dir: Path
    preauth: bool = False

    @property
    def credentials(self) -> Credentials:
        """Default login for the application under test."""
        return Credentials(self.username, self.password, "Configured default user")

    @property
    def screenshots_dir(self) -> Path:
        return self.artifacts_dir / "screenshots"


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_mode(name: str, raw: str, allowed: tuple[str, ...]) -> str:
    if raw not in allowed:
        raise ValueError(f"{name} must be one of {', '.join(allowed)}, got {raw!r}")
    return raw


def load_config(
    env: str | None = None, environ: Mapping[str, str] | None = None
) -> EnvironmentConfig:
    """
    Build the configuration for a test run.

    Args:
        env: Profile name; defaults to ``ENV`` from ``environ``.
        environ: Source of overrides; defaults to ``os.environ``.

    Returns:
        Frozen configuration.

    Raises:
        ValueError: If a numeric or artifact-mode override is malformed.
    """
    environ = os.environ if environ is None else environ
    name = env or environ.get("ENV", "dev")
    profile = get_config(name)
    if name not in config:
        logger.warning("Unknown environment %r, using dev settings", name)
        name = "dev"
    elif name == "default":
        name = "dev"

    def setting(key: str, env_var: str) -> str:
        if key not in profile.LOCKED and env_var in environ:
            return environ[env_var]
        return str(getattr(profile, key))

    headless = profile.HEADLESS
    if "HEADLESS" not in profile.LOCKED and "HEADLESS" in environ:
        headless = environ["HEADLESS"].strip().lower() != "false"

    resolved = EnvironmentConfig(
        name=name,
        base_url=setting("BASE_URL", "BASE_URL"),
        api_url=setting("API_URL", "API_URL"),
        saucedemo_url=setting("SAUCEDEMO_URL", "SAUCEDEMO_URL"),
        username=setting("USERNAME", "TEST_USERNAME"),
        password=setting("PASSWORD", "TEST_PASSWORD"),
        timeout_ms=_parse_int("TIMEOUT", setting("TIMEOUT_MS", "TIMEOUT")),
        headless=headless,
        slow_mo_ms=_parse_int("SLOW_MO", setting("SLOW_MO_MS", "SLOW_MO")),
        screenshot=_parse_mode(
            "SCREENSHOT", setting("SCREENSHOT", "SCREENSHOT"), SCREENSHOT_MODES
        ),
        video=_parse_mode("VIDEO", setting("VIDEO", "VIDEO"), RECORDING_MODES),
        trace=_parse_mode("TRACE", setting("TRACE", "TRACE"), RECORDING_MODES),
        auth_state_dir=Path(environ.get("AUTH_STATE_DIR", "auth-state")),
        artifacts_dir=Path(environ.get("ARTIFACTS_DIR", "test-results")),
        preauth=environ.get("PREAUTH", "").strip().lower() == "true",
    )

    logger.info("Using %s environment configuration", resolved.name)
    logger.info("Base URL: %s", resolved.base_url)
    logger.info("Headless: %s", resolved.headless)
    return resolved
