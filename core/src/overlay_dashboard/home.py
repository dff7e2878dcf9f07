from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DashboardPaths:
    home: Path
    config_dir: Path
    logs_dir: Path

    @property
    def dashboard_config_path(self) -> Path:
        return self.config_dir / "dashboard.json"

    @property
    def log_path(self) -> Path:
        return self.logs_dir / "dashboard.log"


def resolve_dashboard_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("OVERLAY_DASHBOARD_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Relative values are anchored at the user's home, never at the CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "OverlayDashboard"
            return Path.home() / "AppData" / "Local" / "OverlayDashboard"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "OverlayDashboard"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "overlay-dashboard"
        return Path.home() / ".local" / "share" / "overlay-dashboard"

    return default_home().resolve()


def ensure_dashboard_layout(home: Path) -> DashboardPaths:
    home.mkdir(parents=True, exist_ok=True)

    config_dir = home / "config"
    logs_dir = home / "logs"

    for path in (config_dir, logs_dir):
        path.mkdir(parents=True, exist_ok=True)

    return DashboardPaths(home=home, config_dir=config_dir, logs_dir=logs_dir)
