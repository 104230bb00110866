"""
Process entry point: python -m dockpilot

Sets up logging to the XDG log file, connects to the Docker daemon and runs
the configured renderer (curses by default, or Textual). Exits with status 1
and a diagnostic on stderr when the Docker client cannot be constructed or
the renderer cannot start.
"""

import curses
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

from . import get_log_path
from .backend import DockerBackend
from .config import AppConfig, LogConfig, RENDERERS, config_manager
from .errors import BackendUnavailable

logger = logging.getLogger("dockpilot")


def _file_handler(path: str, log_cfg: LogConfig) -> logging.Handler:
    return logging.handlers.RotatingFileHandler(
        path,
        maxBytes=log_cfg.max_size_mb * 1024 * 1024,
        backupCount=log_cfg.backup_count,
    )


def setup_logging(config: AppConfig) -> None:
    """Log to a rotating file; the terminal belongs to the UI."""
    log_cfg = config.logging
    path = log_cfg.file_path or get_log_path()
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = _file_handler(path, log_cfg)
    except OSError as e:
        print(f"dockpilot: cannot log to {path} ({e}), using {get_log_path()}", file=sys.stderr)
        handler = _file_handler(get_log_path(), log_cfg)
    handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s'))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_cfg.level.upper(), logging.INFO))


def select_renderer(config: AppConfig) -> str:
    renderer = os.environ.get("DOCKPILOT_RENDERER", config.ui.renderer)
    return renderer if renderer in RENDERERS else "curses"


def main(config: Optional[AppConfig] = None) -> int:
    config = config or config_manager.get_config()
    setup_logging(config)

    try:
        backend = DockerBackend(log_tail=config.docker.log_tail)
    except BackendUnavailable as e:
        print(f"dockpilot: {e}", file=sys.stderr)
        return 1

    renderer = select_renderer(config)
    logger.info(f"Starting {renderer} renderer")
    try:
        if renderer == "textual":
            from .textual_app import run
            run(backend, config)
        else:
            from .main import main as curses_main
            curses.wrapper(curses_main, backend, config)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"Renderer failed: {e}", exc_info=True)
        print(f"dockpilot: cannot start the terminal UI: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
