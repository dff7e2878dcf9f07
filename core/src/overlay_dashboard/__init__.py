from overlay_dashboard.config import DashboardConfig, load_dashboard_config
from overlay_dashboard.home import DashboardPaths, ensure_dashboard_layout, resolve_dashboard_home
from overlay_dashboard.validation import ValidatedRange, validate

__version__ = "0.1.0"

__all__ = [
    "DashboardConfig",
    "DashboardPaths",
    "ValidatedRange",
    "__version__",
    "ensure_dashboard_layout",
    "load_dashboard_config",
    "resolve_dashboard_home",
    "validate",
]
