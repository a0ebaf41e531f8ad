from __future__ import annotations

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 5.0


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass
class AutoPasteConfig:
    """Target applications and the platforms where auto-paste runs."""

    applications: list = field(default_factory=list)
    platforms: list[str] = field(default_factory=lambda: ["linux"])

    def target_applications(self) -> list[str]:
        """Return the usable target application names.

        Non-string entries and entries that are blank after trimming are
        dropped; the survivors are returned trimmed, in configured order.
        """
        return [
            app.strip()
            for app in self.applications
            if isinstance(app, str) and app.strip()
        ]


@dataclass
class ProcessConfig:
    """OS process query settings."""

    query_timeout: float = DEFAULT_QUERY_TIMEOUT


@dataclass
class DebugConfig:
    """Debug mode settings."""

    enabled: bool = False
    trace: bool = False
    verbose: bool = False
    trace_dir: str | None = None


@dataclass
class AppConfig:
    """Top-level application configuration aggregating all subsections."""

    auto_paste: AutoPasteConfig = field(default_factory=AutoPasteConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    def is_auto_paste_enabled(self, system: str | None = None) -> bool:
        """Check whether auto-paste should run on this platform.

        Args:
            system: Platform name as reported by ``platform.system()``.
                Detected when omitted.

        Returns:
            True when the platform is listed in ``auto_paste.platforms``
            and at least one target application is configured.
        """
        if system is None:
            system = platform.system()
        allowed = {p.lower() for p in self.auto_paste.platforms}
        if system.lower() not in allowed:
            return False
        return len(self.auto_paste.target_applications()) > 0


def _section(raw: dict, name: str) -> dict:
    # `or {}` fallback handles YAML null values for optional sections
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{name} must be a mapping")
    return value


def load_config(path: str) -> AppConfig:
    """Load and validate application configuration from a YAML file.

    Every section is optional; missing values fall back to the dataclass
    defaults.

    Args:
        path: Filesystem path to the YAML configuration file.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigError: If the file does not exist, is not a mapping, or a
            value has the wrong type (non-list applications or platforms,
            non-positive query_timeout).
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")

    auto_paste_raw = _section(raw, "auto_paste")
    process_raw = _section(raw, "process")
    debug_raw = _section(raw, "debug")

    applications = auto_paste_raw.get("applications", []) or []
    if not isinstance(applications, list):
        raise ConfigError("auto_paste.applications must be a list")

    platforms = auto_paste_raw.get("platforms", ["linux"])
    if not isinstance(platforms, list):
        raise ConfigError("auto_paste.platforms must be a list")

    query_timeout = process_raw.get("query_timeout", DEFAULT_QUERY_TIMEOUT)
    if (
        isinstance(query_timeout, bool)
        or not isinstance(query_timeout, (int, float))
        or query_timeout <= 0
    ):
        raise ConfigError("process.query_timeout must be a positive number")

    logger.debug("Loaded config from %s", path)
    logger.debug("Auto-paste applications=%s platforms=%s", applications, platforms)

    return AppConfig(
        auto_paste=AutoPasteConfig(
            applications=applications,
            platforms=[str(p) for p in platforms],
        ),
        process=ProcessConfig(query_timeout=float(query_timeout)),
        debug=DebugConfig(
            enabled=bool(debug_raw.get("enabled", False)),
            trace=bool(debug_raw.get("trace", False)),
            verbose=bool(debug_raw.get("verbose", False)),
            trace_dir=debug_raw.get("trace_dir"),
        ),
    )
