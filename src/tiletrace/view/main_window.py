"""
Main Application Window
=======================
The primary GUI container: menu bar, zoom toolbar, the map canvas and the
command bar that shows the traced directions.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (Open, zoom levels, Copy, Clear) to the
   Store and keeps the toolbar in sync with the Store's signals.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from PySide6.QtCore import QSettings, QTimer
from PySide6.QtGui import QAction, QActionGroup, QCloseEvent, QGuiApplication, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog, QHBoxLayout, QLabel, QLineEdit, QMainWindow, QMessageBox, QPushButton, QVBoxLayout, QWidget
)

from tiletrace.app.application import KEY_WINDOW_GEOMETRY, VISIBLE_APP_NAME, remember_map_path
from tiletrace.app.state import Store
from tiletrace.config import COPY_FEEDBACK_MS, ZOOM_FIT, ZOOM_LEVELS
from tiletrace.controller.map_loader import MapLoadError, file_filter, load_map
from tiletrace.model.geometry import ViewTransform, ZoomMode
from tiletrace.model.path import PathTracer
from tiletrace.view.widgets.map_canvas import MapCanvas

logger = logging.getLogger(__name__)


def zoom_label(level: str) -> str:
    return "Fit" if level == ZOOM_FIT else f"{level}x"


class MainWindow(QMainWindow):
    def __init__(self, store: Optional[Store] = None) -> None:
        super().__init__()
        self.store: Store = store if store is not None else Store(parent=self)
        self.map_path: Optional[str] = None

        self.update_window_title()
        self.resize(1200, 800)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)

        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- 1. MAP CANVAS ---
        self.canvas = MapCanvas(self.store)
        main_layout.addWidget(self.canvas, stretch=1)

        # --- 2. COMMAND BAR ---
        command_bar = QWidget()
        bar_layout = QHBoxLayout(command_bar)
        bar_layout.setContentsMargins(8, 6, 8, 6)

        bar_layout.addWidget(QLabel("Path:"))
        self.cmd_output = QLineEdit()
        self.cmd_output.setReadOnly(True)
        self.cmd_output.setPlaceholderText("Ctrl+drag (mouse) or drag with one finger to trace a path")
        bar_layout.addWidget(self.cmd_output, stretch=1)

        self.btn_copy = QPushButton("Copy")
        self.btn_copy.setEnabled(False)
        bar_layout.addWidget(self.btn_copy)

        self.btn_clear = QPushButton("Clear")
        self.btn_clear.setEnabled(False)
        bar_layout.addWidget(self.btn_clear)

        main_layout.addWidget(command_bar)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        # --- SIGNAL CONNECTIONS ---
        self.btn_copy.clicked.connect(self.on_copy_clicked)
        self.btn_clear.clicked.connect(self.store.clear_path)
        self.store.command_changed.connect(self.on_command_changed)
        self.store.path_changed.connect(self.on_path_changed)
        self.store.transform_changed.connect(self.on_transform_changed)

        self._copy_feedback_timer = QTimer(self)
        self._copy_feedback_timer.setSingleShot(True)
        self._copy_feedback_timer.setInterval(COPY_FEEDBACK_MS)
        self._copy_feedback_timer.timeout.connect(lambda: self.btn_copy.setText("Copy"))

        self._restore_geometry()
        self._set_active_zoom(ZOOM_FIT)

    def _create_actions(self) -> None:
        self.act_open = QAction("Open map…", self)
        self.act_open.setShortcut(QKeySequence.StandardKey.Open)
        self.act_open.triggered.connect(self.on_file_open)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_copy = QAction("Copy path", self)
        self.act_copy.setShortcut(QKeySequence.StandardKey.Copy)
        self.act_copy.triggered.connect(self.on_copy_clicked)

        self.act_clear = QAction("Clear path", self)
        self.act_clear.setShortcut("Esc")
        self.act_clear.triggered.connect(self.store.clear_path)

        # Zoom levels: exclusive, but "none checked" is allowed after free zooming
        self.zoom_group = QActionGroup(self)
        self.zoom_group.setExclusionPolicy(QActionGroup.ExclusionPolicy.ExclusiveOptional)
        self.zoom_actions: dict[str, QAction] = {}
        for level in ZOOM_LEVELS:
            act = QAction(zoom_label(level), self)
            act.setCheckable(True)
            act.triggered.connect(lambda _checked=False, lvl=level: self.on_zoom_requested(lvl))
            self.zoom_group.addAction(act)
            self.zoom_actions[level] = act

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        path_menu = menu_bar.addMenu("&Path")
        path_menu.addAction(self.act_copy)
        path_menu.addAction(self.act_clear)

        view_menu = menu_bar.addMenu("&View")
        for act in self.zoom_actions.values():
            view_menu.addAction(act)

    def _create_toolbar(self) -> None:
        toolbar = self.addToolBar("Zoom")
        toolbar.setMovable(False)
        for act in self.zoom_actions.values():
            toolbar.addAction(act)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        name = os.path.basename(self.map_path) if self.map_path else "No map"
        self.setWindowTitle(f"{VISIBLE_APP_NAME} - [{name}]")

    def _set_active_zoom(self, level: Optional[str]) -> None:
        """Check the toolbar action for level, or none if level is None."""
        for lvl, act in self.zoom_actions.items():
            act.setChecked(lvl == level)

    def _restore_geometry(self) -> None:
        geometry = QSettings().value(KEY_WINDOW_GEOMETRY)
        if geometry is not None:
            self.restoreGeometry(geometry)

    # --- SLOTS ---

    def open_map(self, path: str) -> bool:
        """Load the map at path and reset the session. Returns False on failure."""
        try:
            map_image = load_map(path)
        except MapLoadError as e:
            logger.error("Failed to load the map image: %s", e)
            QMessageBox.critical(self, "Error", f"Failed to load the map image:\n{e}")
            return False

        self.map_path = map_image.path
        self.canvas.set_pixmap(map_image.pixmap)
        self.store.resize(self.canvas.container_rect())
        self.store.set_image_size(map_image.size)
        remember_map_path(map_image.path)
        self._set_active_zoom(ZOOM_FIT)
        self.update_window_title()
        self.statusBar().showMessage(f"{map_image.size.width} x {map_image.size.height} px", 3000)
        return True

    def on_file_open(self) -> None:
        start_dir = os.path.dirname(self.map_path) if self.map_path else ""
        fname, _ = QFileDialog.getOpenFileName(self, "Open Map", start_dir, file_filter())
        if fname:
            self.open_map(fname)

    def on_zoom_requested(self, level: str) -> None:
        if self.store.image_size.is_empty:
            self._set_active_zoom(None)
            return
        self.store.zoom_to(level)
        self._set_active_zoom(level)

    def on_transform_changed(self, transform: ViewTransform) -> None:
        """Uncheck the numeric level once pan, pinch or wheel left it behind."""
        if transform.mode == ZoomMode.FIT:
            self._set_active_zoom(ZOOM_FIT)
            return
        checked = self.zoom_group.checkedAction()
        if checked is None:
            return
        level = next(lvl for lvl, act in self.zoom_actions.items() if act is checked)
        if level == ZOOM_FIT or abs(float(level) - transform.scale) > 1e-9:
            self._set_active_zoom(None)

    def on_command_changed(self, command: str) -> None:
        self.cmd_output.setText(command)
        self.btn_copy.setEnabled(bool(command))

    def on_path_changed(self, tracer: PathTracer) -> None:
        self.btn_clear.setEnabled(not tracer.state.is_empty)

    def on_copy_clicked(self) -> None:
        text = self.cmd_output.text()
        if not text:
            return
        QGuiApplication.clipboard().setText(text)
        self.btn_copy.setText("Copied")
        self._copy_feedback_timer.start()
        self.statusBar().showMessage("Path copied to clipboard", COPY_FEEDBACK_MS)

    def closeEvent(self, event: QCloseEvent, /) -> None:
        QSettings().setValue(KEY_WINDOW_GEOMETRY, self.saveGeometry())
        event.accept()
