from PySide6.QtWidgets import QApplication
from PySide6.QtCore import QCoreApplication, QSettings

import sys
import os

ORG_ID = "tiletrace"
APP_ID = "tiletrace"
ORG_DOMAIN = "tiletrace.local"

VISIBLE_APP_NAME = "TileTrace"

# QSettings keys
KEY_LAST_MAP = "map/last_path"
KEY_WINDOW_GEOMETRY = "window/geometry"


def create_app(argv: list[str] | None = None) -> QApplication:
    """Create and configure the QApplication instance."""
    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")

    QCoreApplication.setOrganizationName(ORG_ID)
    QCoreApplication.setOrganizationDomain(ORG_DOMAIN)
    QCoreApplication.setApplicationName(APP_ID)
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)

    app = QApplication(sys.argv if argv is None else argv)

    # Set the visible, translatable display name
    visible_name = QCoreApplication.translate("App", VISIBLE_APP_NAME)
    app.setApplicationDisplayName(visible_name)

    return app


def last_map_path() -> str | None:
    """Path of the map opened in the previous session, if it still exists."""
    path = QSettings().value(KEY_LAST_MAP, "", type=str)
    if path and os.path.isfile(path):
        return path
    return None


def remember_map_path(path: str) -> None:
    QSettings().setValue(KEY_LAST_MAP, path)
