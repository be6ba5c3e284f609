from __future__ import annotations

import os
from typing import Optional

from PySide6.QtWidgets import QDialog, QDialogButtonBox, QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from planviewer.model.document import PlanDocument
from planviewer.model.geometry_primitives import Category


def plan_info_rows(document: PlanDocument, filepath: Optional[str]) -> list[tuple[str, str]]:
    """Label/value pairs shown in the dialog."""
    stats = document.statistics
    rows = [
        ("File name:", os.path.basename(filepath) if filepath else "-"),
        ("View name:", document.name or "Unnamed View"),
        ("Routes:", str(stats.routes)),
        ("Routes with geometry:", str(len(document.route_ids()))),
        ("Panels:", str(stats.panels)),
        ("Fixtures:", str(stats.fixtures)),
        ("Fittings:", str(stats.fittings)),
    ]
    for category in Category:
        rows.append((f"{category.display_name} segments:", str(document.count(category))))
    if stats.dropped_lines:
        rows.append(("Skipped (missing endpoints):", str(stats.dropped_lines)))
    if stats.truncated_lines:
        rows.append(("Not shown (element cap):", str(stats.truncated_lines)))
    return rows


class PlanInfoDialog(QDialog):
    def __init__(self, document: PlanDocument, filepath: Optional[str], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Plan Details")
        self.setMinimumWidth(320)

        layout = QVBoxLayout(self)

        group = QGroupBox("Plan")
        form = QFormLayout(group)
        for label, value in plan_info_rows(document, filepath):
            form.addRow(label, QLabel(value))
        layout.addWidget(group)

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)
