"""
The CONTROLLER layer owns the mutable viewer state (viewport, selection) and
turns commands and pointer input into changes of it.
"""
from planviewer.controller.session import PlanSession
from planviewer.controller.selection_controller import SelectionController
from planviewer.controller.viewport_controller import ViewportController

__all__ = ["PlanSession", "SelectionController", "ViewportController"]
