"""
Main curses event loop for dockpilot.

This module contains the render/input loop that coordinates between:
  - curses terminal UI (rendering via ui.py)
  - the view state machine (state.py)
  - background actions (runner.py threads, reporting through a queue)

Loop iteration:
  1. Drain finished background actions into the state machine
  2. Present the current view if the machine's version changed
  3. Redraw if the screen is dirty, the output pane grew or the terminal
     was resized
  4. Poll one key (getch with the configured timeout) and route it

Thread Safety:
  - Only this thread installs views and calls curses
  - Workers never touch curses (they only enqueue completions and write to
    the OutputLog)
"""

import curses
import logging
import time
from typing import Optional

from .backend import ContainerBackend
from .config import AppConfig, config_manager
from .model import TableView
from .screen import OutputLog
from .state import ViewStateMachine
from .ui import CursesScreen, init_colors, translate_key

logger = logging.getLogger(__name__)


def main(stdscr, backend: ContainerBackend, config: Optional[AppConfig] = None) -> None:
    logger.info("Main started")
    config = config or config_manager.get_config()

    curses.curs_set(0)
    stdscr.keypad(True)
    stdscr.nodelay(True)
    stdscr.timeout(config.ui.refresh_interval)
    init_colors(config.ui.color_theme)

    output = OutputLog(config.ui.output_lines)
    machine = ViewStateMachine(backend, output=output, keybindings=config.keybindings)
    screen = CursesScreen(stdscr, output)
    machine.start()
    logger.info("State machine started")

    last_version = -1
    last_output = -1
    last_size = None

    while True:
        try:
            machine.process_completions()
            if machine.version != last_version:
                machine.present(screen)
                last_version = machine.version

            size = stdscr.getmaxyx()
            output_version = output.version
            if screen.dirty or output_version != last_output or size != last_size:
                if size != last_size:
                    logger.info(f"Resize: {size[0]}x{size[1]}")
                    stdscr.clear()
                screen.draw()
                curses.doupdate()
                last_output = output_version
                last_size = size

            ch = stdscr.getch()
            if ch == curses.ERR:
                continue
            if ch == curses.KEY_RESIZE:
                screen.force_redraw()
                continue

            key = translate_key(ch)
            if key is None:
                continue
            if key == config.keybindings.quit and isinstance(machine.current, TableView):
                logger.info("Quitting")
                break
            screen.feed_key(key)

        except KeyboardInterrupt:
            logger.info("KeyboardInterrupt caught, exiting...")
            break
        except Exception as e:
            logger.error(f"Error in main loop: {e}", exc_info=True)
            screen.message = f"Error: {e}"
            screen.force_redraw()
            time.sleep(1)  # Prevent tight loop on error
