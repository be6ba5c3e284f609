from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Signal, Qt
from PySide6.QtGui import QColor, QIcon, QPixmap
from PySide6.QtWidgets import QCheckBox, QGroupBox, QVBoxLayout, QWidget

from planviewer.config import LAYER_SWATCH_COLORS
from planviewer.model.geometry_primitives import Category


def _swatch(color: str, size: int = 12) -> QIcon:
    pix = QPixmap(size, size)
    pix.fill(QColor(color))
    return QIcon(pix)


class LayersPanel(QWidget):
    """Checklist of plan layers with a colour swatch each."""
    layer_toggled = Signal(object, bool)  # (Category, visible)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)

        group = QGroupBox("Layers")
        group_layout = QVBoxLayout(group)

        self._checks: dict[Category, QCheckBox] = {}
        for category in Category:
            check = QCheckBox(category.display_name)
            check.setIcon(_swatch(LAYER_SWATCH_COLORS[category.value]))
            check.setChecked(True)
            check.toggled.connect(lambda checked, c=category: self.layer_toggled.emit(c, checked))
            group_layout.addWidget(check)
            self._checks[category] = check

        layout.addWidget(group)
        layout.addStretch()

    def checkbox(self, category: Category) -> QCheckBox:
        return self._checks[category]

    def sync(self, visibility: dict[Category, bool]) -> None:
        """Reflect the session state without echoing toggles back."""
        for category in Category:
            check = self.checkbox(category)
            check.blockSignals(True)
            check.setChecked(visibility.get(category, True))
            check.blockSignals(False)
