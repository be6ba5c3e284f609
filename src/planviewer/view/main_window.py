"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, Toolbar, Layers panel and
the plan canvas.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (File -> Open, zoom buttons, the
   selection tool) to the PlanSession command surface.
3. Errors: It is the only place where file problems are shown to the user.
"""
import json
import logging
import os
from typing import Optional

from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QMainWindow, QSplitter, QFileDialog, QMessageBox, QLabel, QToolBar, QMenu
)

from planviewer.config import ASSETS_PATH, SETTINGS_ORGANIZATION, SETTINGS_APPLICATION
from planviewer.controller.session import PlanSession
from planviewer.model.document import PlanDocument
from planviewer.model.io import PlanLoader, PlanLoadError
from planviewer.model.recent_files import RecentFiles
from planviewer.view.dialogs.plan_info_dialog import PlanInfoDialog
from planviewer.view.widgets.layers_panel import LayersPanel
from planviewer.view.widgets.plan_canvas import PlanCanvas

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Electrical Plan Viewer"
SAMPLE_PLAN_PATH = os.path.join(ASSETS_PATH, "sample_plan.json")


class MainWindow(QMainWindow):
    def __init__(self, session: PlanSession, settings: Optional[QSettings] = None) -> None:
        super().__init__()
        self.session: PlanSession = session
        self.filepath: Optional[str] = None
        self.settings: QSettings = settings or QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)
        self.recent_files: RecentFiles = self._read_recent_files()

        self.update_window_title()
        self.resize(1400, 900)

        # --- CONTENT AREA ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # Left: layer checklist
        self.layers_panel = LayersPanel()
        splitter.addWidget(self.layers_panel)

        # Right: the plan
        self.canvas = PlanCanvas(self.session)
        splitter.addWidget(self.canvas)

        splitter.setSizes([250, 1150])
        splitter.setStretchFactor(1, 1)

        # --- STATUS BAR ---
        self.zoom_label = QLabel()
        self.selection_label = QLabel()
        self.statusBar().addWidget(self.selection_label, 1)
        self.statusBar().addPermanentWidget(self.zoom_label)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        # --- SIGNAL CONNECTIONS ---
        # 1. Layer checklist -> session
        self.layers_panel.layer_toggled.connect(self.session.set_layer_visible)
        self.session.layers_changed.connect(self.layers_panel.sync)

        # 2. Session state -> labels and action states
        self.session.viewport.viewport_committed.connect(self.update_zoom_label)
        self.session.viewport.selection_mode_changed.connect(self.act_select.setChecked)
        self.session.selection.selection_changed.connect(self.update_selection_label)
        self.session.document_changed.connect(self.on_document_changed)

        self.update_zoom_label()
        self.update_selection_label()
        self._set_plan_actions_enabled(False)

    def _create_actions(self) -> None:
        # File Actions
        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut(QKeySequence.Open)
        self.act_open.triggered.connect(self.on_file_open)

        self.act_open_sample = QAction("Open Sample Plan", self)
        self.act_open_sample.triggered.connect(lambda: self.open_file(SAMPLE_PLAN_PATH))
        self.act_open_sample.setEnabled(os.path.exists(SAMPLE_PLAN_PATH))

        self.act_info = QAction("Plan Info", self)
        self.act_info.setShortcut("Ctrl+I")
        self.act_info.triggered.connect(self.on_plan_info)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        # View Actions
        self.act_fit = QAction("Fit to Screen", self)
        self.act_fit.setShortcut("F")
        self.act_fit.triggered.connect(self.session.fit_to_screen)

        self.act_zoom_in = QAction("Zoom In", self)
        self.act_zoom_in.setShortcut(QKeySequence.ZoomIn)
        self.act_zoom_in.triggered.connect(self.session.zoom_in)

        self.act_zoom_out = QAction("Zoom Out", self)
        self.act_zoom_out.setShortcut(QKeySequence.ZoomOut)
        self.act_zoom_out.triggered.connect(self.session.zoom_out)

        self.act_reset = QAction("Reset View", self)
        self.act_reset.setShortcut("Ctrl+0")
        self.act_reset.triggered.connect(self.session.reset_view)

        # Selection Actions
        self.act_select = QAction("Rectangle Selection", self)
        self.act_select.setShortcut("S")
        self.act_select.setCheckable(True)
        self.act_select.triggered.connect(self.on_toggle_selection)

        self.act_clear_selection = QAction("Clear Selection", self)
        self.act_clear_selection.setShortcut("Esc")
        self.act_clear_selection.triggered.connect(self.session.clear_selection)
        self.act_clear_selection.setEnabled(False)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_open_sample)
        self.recent_menu = QMenu("Open Recent", self)
        file_menu.addMenu(self.recent_menu)
        self._rebuild_recent_menu()
        file_menu.addSeparator()
        file_menu.addAction(self.act_info)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_fit)
        view_menu.addAction(self.act_zoom_in)
        view_menu.addAction(self.act_zoom_out)
        view_menu.addAction(self.act_reset)

        selection_menu = menu_bar.addMenu("&Selection")
        selection_menu.addAction(self.act_select)
        selection_menu.addAction(self.act_clear_selection)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Viewer", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        for action in (self.act_open, None, self.act_fit, self.act_zoom_out, self.act_zoom_in,
                       self.act_reset, None, self.act_select, self.act_clear_selection, None, self.act_info):
            if action is None:
                toolbar.addSeparator()
            else:
                toolbar.addAction(action)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        title = VISIBLE_APP_NAME
        if self.filepath:
            title += f" - [{os.path.basename(self.filepath)}]"
        self.setWindowTitle(title)

    def update_zoom_label(self, *_: object) -> None:
        self.zoom_label.setText(f"{self.session.zoom_percent}%")

    def update_selection_label(self, *_: object) -> None:
        count = self.session.selected_count
        self.act_clear_selection.setEnabled(count > 0)
        if count == 0:
            self.selection_label.setText("")
            return
        names = [run or route_id or "?" for route_id, run in self.session.selected_routes()]
        shown = ", ".join(names[:5])
        if len(names) > 5:
            shown += f", ... (+{len(names) - 5})"
        self.selection_label.setText(f"Selected: {count}  [{shown}]")

    def _set_plan_actions_enabled(self, enabled: bool) -> None:
        for action in (self.act_fit, self.act_zoom_in, self.act_zoom_out, self.act_reset,
                       self.act_select, self.act_info):
            action.setEnabled(enabled)

    # --- RECENT FILES ---
    def _read_recent_files(self) -> RecentFiles:
        raw = self.settings.value("recent_files", "[]")
        try:
            return RecentFiles.from_list(json.loads(raw) if isinstance(raw, str) else [])
        except json.JSONDecodeError:
            logger.warning("Stored recent file list is corrupted, starting empty.")
            return RecentFiles()

    def _write_recent_files(self) -> None:
        self.settings.setValue("recent_files", json.dumps(self.recent_files.to_list()))

    def _rebuild_recent_menu(self) -> None:
        self.recent_menu.clear()
        entries = self.recent_files.entries()
        for entry in entries:
            act = QAction(f"{entry.name}  ({entry.size}, {entry.opened})", self.recent_menu)
            act.triggered.connect(lambda checked=False, p=entry.path: self.open_file(p))
            self.recent_menu.addAction(act)
        self.recent_menu.setEnabled(bool(entries))

    # --- SLOTS ---
    def on_file_open(self) -> None:
        filepath, _ = QFileDialog.getOpenFileName(self, "Open Plan", "", "Plan files (*.json)")
        if filepath:
            self.open_file(filepath)

    def open_file(self, filepath: str) -> bool:
        try:
            document = PlanLoader.load_file(filepath)
        except PlanLoadError as e:
            logger.error(f"Failed to open '{filepath}': {e}")
            if filepath in [r.path for r in self.recent_files.entries()] and not os.path.exists(filepath):
                self.recent_files.remove(filepath)
                self._write_recent_files()
                self._rebuild_recent_menu()
            QMessageBox.critical(self, "Failed to process file", str(e))
            return False

        self.filepath = filepath
        self.session.load_document(document)
        self.recent_files.add(filepath)
        self._write_recent_files()
        self._rebuild_recent_menu()
        self.update_window_title()
        return True

    def on_document_changed(self, document: PlanDocument) -> None:
        self._set_plan_actions_enabled(True)
        self.update_zoom_label()
        self.update_selection_label()

    def on_toggle_selection(self) -> None:
        active = self.session.toggle_selection_mode()
        self.act_select.setChecked(active)

    def on_plan_info(self) -> None:
        dialog = PlanInfoDialog(self.session.document, self.filepath, self)
        dialog.exec()
