"""
Application Initialization
==========================
This module wires the Store (model), the MainWindow (view) and the map loader
together and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Creates the Qt Application.
3. Instantiates the Main Window, which owns the Store.
4. Opens the initial map: command-line argument, then the map from the last
   session, then the bundled default.

Usage:
    $ python -m tiletrace [MAP_IMAGE]
"""
import logging
import os
import sys
from typing import Optional

from tiletrace.app.application import create_app, last_map_path
from tiletrace.config import DEFAULT_MAP_PATH
from tiletrace.logging_config import setup_logging
from tiletrace.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def initial_map_path(args: list[str]) -> Optional[str]:
    """Pick the map to open at start-up from the positional args, QSettings or assets."""
    positional = [a for a in args if not a.startswith("-")]
    if positional:
        return positional[0]
    remembered = last_map_path()
    if remembered:
        return remembered
    if os.path.isfile(DEFAULT_MAP_PATH):
        return DEFAULT_MAP_PATH
    return None


def main() -> int:
    # 1. Setup Logging (Console + Optional File)
    # TILETRACE_LOG_LEVEL=DEBUG shows gesture transitions
    setup_logging()

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the Main Window
    window = MainWindow()
    window.show()

    # 4. Load the first map (arguments()[0] is the program name)
    path = initial_map_path(app.arguments()[1:])
    if path is not None:
        window.open_map(path)
    else:
        logger.info("No map to open at start-up.")

    # 5. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
