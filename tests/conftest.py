import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from planviewer.model.document import PlanDocument
from planviewer.model.io import PlanLoader


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def line(x1, y1, x2, y2):
    return {"Start": {"X": x1, "Y": y1, "Z": 0}, "End": {"X": x2, "Y": y2, "Z": 0}}


def make_plan_dict(routes=None, other=None, panels=None, name="Test View"):
    """
    Minimal exported plan. `routes` maps a route id to a list of (x1, y1, x2, y2).
    """
    routes = routes if routes is not None else {}
    return {
        "ViewName": name,
        "PanelsDataDict": {
            str(pid): {"Id": pid, "Lines2D": [line(*c) for c in coords]}
            for pid, coords in (panels or {}).items()
        },
        "ViewLines": {
            "Other": [line(*c) for c in (other or [])],
        },
        "SingleRoutesInfoDict": {
            rid: {
                "Id": rid,
                "RunName": f"Run {rid}",
                "Route2D": {"Segments": [{"Segment2D": line(*c)} for c in coords]},
            }
            for rid, coords in routes.items()
        },
    }


def make_document(**kwargs) -> PlanDocument:
    return PlanLoader.from_dict(make_plan_dict(**kwargs))


@pytest.fixture
def square_document() -> PlanDocument:
    """
    Outline of a 100 x 100 room (background) and three routes:
    r0 runs across the bottom left, r1 across the top right, r2 diagonally through the middle.
    """
    return make_document(
        other=[(0, 0, 100, 0), (100, 0, 100, 100), (100, 100, 0, 100), (0, 100, 0, 0)],
        routes={
            "A": [(10, 10, 30, 10)],
            "B": [(70, 90, 90, 90)],
            "C": [(40, 40, 60, 60)],
        },
    )
