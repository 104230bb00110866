"""
dockpilot - An interactive terminal dashboard for Docker containers.

Browse the containers known to the local Docker daemon and drive them from the
keyboard: start, stop, restart, pause, unpause and delete containers, follow
their logs, run ad-hoc commands inside them, inspect network attachments and
filter the list by name or status.

Main Components:
  - state.py: View state machine (the single "current view" and its transitions)
  - runner.py: Background action runner (one thread per backend call)
  - backend.py: Docker API wrapper (docker-py)
  - snapshot.py: Builds display rows from raw container records
  - prompt.py: Keystroke buffer for the action menu and text prompts
  - ui.py / main.py: curses renderer and event loop
  - textual_app.py: Textual renderer

Usage:
  python -m dockpilot

Dependencies:
  - docker>=7.0.0
  - PyYAML, textual
  - Python 3.10+
  - curses (built-in, not available on Windows natively)
"""

import os
from pathlib import Path

__version__ = "0.1.0"


def get_log_path() -> str:
    """
    Get the log file path following XDG Base Directory spec.

    Returns XDG_DATA_HOME/dockpilot/logs/dockpilot.log with fallback to /tmp.
    Creates directory if it doesn't exist.

    Returns:
        str: Absolute path to log file (/tmp/dockpilot.log as fallback)
    """
    xdg_data_home = os.environ.get('XDG_DATA_HOME')
    if not xdg_data_home:
        xdg_data_home = Path.home() / '.local' / 'share'
    else:
        xdg_data_home = Path(xdg_data_home)

    log_dir = xdg_data_home / 'dockpilot' / 'logs'

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return str(log_dir / 'dockpilot.log')
    except (PermissionError, OSError):
        return '/tmp/dockpilot.log'
