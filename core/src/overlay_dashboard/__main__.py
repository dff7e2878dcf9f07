from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from overlay_dashboard.app import create_app
from overlay_dashboard.config import load_dashboard_config
from overlay_dashboard.home import ensure_dashboard_layout, resolve_dashboard_home


def main() -> None:
    home = resolve_dashboard_home()
    paths = ensure_dashboard_layout(home)
    config = load_dashboard_config(paths)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(
                paths.log_path,
                maxBytes=config.logging.max_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
                encoding="utf-8",
            ),
            logging.StreamHandler(),
        ],
    )

    host = os.environ.get("OVERLAY_DASHBOARD_BIND") or config.network.bind_host

    env_port = os.environ.get("OVERLAY_DASHBOARD_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(config), host=host, port=port)


if __name__ == "__main__":
    main()
