import json
import sys
from pathlib import Path

import pytest

from planviewer.config import MAX_ELEMENTS_PER_CATEGORY, MAX_FILE_SIZE_BYTES
from planviewer.model.geometry_primitives import Category
from planviewer.model.io import PlanLoader, PlanLoadError

from conftest import line, make_plan_dict

SAMPLE_PLAN = Path(__file__).resolve().parent.parent / "assets" / "sample_plan.json"


def test_categories_are_assigned():
    data = make_plan_dict(
        panels={7: [(0, 0, 1, 0)]},
        other=[(0, 0, 5, 5)],
        routes={"R1": [(1, 1, 2, 2), (2, 2, 3, 3)]},
    )
    data["ViewLines"]["ElectricalEquipment"] = [line(1, 1, 2, 1)]
    data["ViewLines"]["ConduitFittings"] = [line(1, 1, 2, 1), line(3, 3, 4, 4)]
    data["ViewLines"]["ElectricalFixture"] = [line(9, 9, 8, 8)]

    doc = PlanLoader.from_dict(data)

    assert doc.name == "Test View"
    assert doc.count(Category.PANEL) == 1
    assert doc.count(Category.OTHER) == 1
    assert doc.count(Category.EQUIPMENT) == 1
    assert doc.count(Category.FITTING) == 2
    assert doc.count(Category.FIXTURE) == 1
    assert doc.count(Category.ROUTE) == 2
    assert len(doc) == 8
    assert all(s.category is Category.FITTING for s in doc.segments(Category.FITTING))


def test_route_segments_carry_owner_and_index():
    doc = PlanLoader.from_dict(make_plan_dict(routes={"R1": [(0, 0, 1, 1)], "R2": [(1, 1, 2, 2), (2, 2, 3, 3)]}))
    routes = doc.segments(Category.ROUTE)
    assert [s.index for s in routes] == [0, 1, 2]
    assert doc.route_owner(0) == ("R1", "Run R1")
    assert doc.route_owner(2) == ("R2", "Run R2")
    assert routes[0].color_key == "route"


def test_lines_missing_an_endpoint_are_dropped():
    data = make_plan_dict(other=[(0, 0, 1, 1)])
    data["ViewLines"]["Other"] += [
        {"Start": {"X": 1, "Y": 1}},
        {"End": {"X": 1, "Y": 1}},
        {"Start": {"X": "a", "Y": 1}, "End": {"X": 2, "Y": 2}},
        {"Start": {"X": True, "Y": 1}, "End": {"X": 2, "Y": 2}},
        None,
    ]
    doc = PlanLoader.from_dict(data)
    assert doc.count(Category.OTHER) == 1
    assert doc.statistics.dropped_lines == 5


def test_route_segment_without_segment2d_is_dropped():
    data = make_plan_dict(routes={"R1": [(0, 0, 1, 1)]})
    data["SingleRoutesInfoDict"]["R1"]["Route2D"]["Segments"].append({"Other": 1})
    doc = PlanLoader.from_dict(data)
    assert doc.count(Category.ROUTE) == 1
    assert doc.statistics.dropped_lines == 1


def test_z_is_ignored():
    p = PlanLoader.read_point({"X": 1, "Y": 2, "Z": 99})
    assert (p.x, p.y) == (1.0, 2.0)


def test_non_finite_coordinates_are_rejected():
    assert PlanLoader.read_point({"X": float("nan"), "Y": 0}) is None
    assert PlanLoader.read_point({"X": 0, "Y": float("inf")}) is None


def test_coordinates_too_large_for_a_float_are_dropped():
    data = make_plan_dict(other=[(10 ** 400, 0, 5, 5), (0, 0, 5, 5)])
    doc = PlanLoader.from_dict(data)
    assert doc.count(Category.OTHER) == 1
    assert doc.statistics.dropped_lines == 1
    assert PlanLoader.read_point({"X": 0, "Y": -(10 ** 400)}) is None


def test_missing_sections_give_empty_document():
    doc = PlanLoader.from_dict({})
    assert len(doc) == 0
    assert doc.name == ""
    assert doc.coords(Category.ROUTE).shape == (0, 4)


def test_malformed_sections_are_ignored():
    doc = PlanLoader.from_dict({
        "PanelsDataDict": [],
        "ViewLines": "nope",
        "SingleRoutesInfoDict": {"R1": "not a route"},
    })
    assert len(doc) == 0


def test_element_cap_truncates_category():
    n = MAX_ELEMENTS_PER_CATEGORY + 5
    data = make_plan_dict(other=[(i, 0, i, 1) for i in range(n)])
    doc = PlanLoader.from_dict(data)
    assert doc.count(Category.OTHER) == MAX_ELEMENTS_PER_CATEGORY
    assert doc.statistics.truncated_lines == 5
    # the first lines are the ones kept
    assert doc.segments(Category.OTHER)[-1].start.x == MAX_ELEMENTS_PER_CATEGORY - 1


def test_statistics_count_objects():
    data = make_plan_dict(
        panels={1: [(0, 0, 1, 0), (1, 0, 1, 1)], 2: [(5, 5, 6, 6)]},
        routes={"R1": [(0, 0, 1, 1), (1, 1, 2, 2)], "R2": [(3, 3, 4, 4)], "R3": []},
    )
    data["ViewLines"]["ElectricalFixture"] = [line(0, 0, 1, 1), line(1, 1, 2, 2)]
    stats = PlanLoader.from_dict(data).statistics
    assert stats.panels == 2
    assert stats.routes == 3
    assert stats.fixtures == 2
    assert stats.fittings == 0


def test_coords_array_is_read_only():
    doc = PlanLoader.from_dict(make_plan_dict(routes={"R1": [(1, 2, 3, 4)]}))
    arr = doc.coords(Category.ROUTE)
    assert arr.tolist() == [[1.0, 2.0, 3.0, 4.0]]
    with pytest.raises(ValueError):
        arr[0, 0] = 5.0


class TestLoadFile:
    def test_round_trip_from_disk(self, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text(json.dumps(make_plan_dict(routes={"R1": [(0, 0, 1, 1)]})), encoding="utf-8")
        doc = PlanLoader.load_file(str(path))
        assert doc.count(Category.ROUTE) == 1

    def test_extension_is_checked(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(PlanLoadError, match="not a JSON file"):
            PlanLoader.load_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(PlanLoadError):
            PlanLoader.load_file(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PlanLoadError, match="Failed to parse JSON"):
            PlanLoader.load_file(str(path))

    def test_oversized_integer_literal(self, tmp_path):
        path = tmp_path / "digits.json"
        other = [{"Start": {"X": "DIGITS", "Y": 0}, "End": {"X": 5, "Y": 5}}]
        text = json.dumps({"ViewLines": {"Other": other}}).replace('"DIGITS"', "9" * 5000)
        path.write_text(text, encoding="utf-8")

        limit = sys.get_int_max_str_digits() if hasattr(sys, "get_int_max_str_digits") else 0
        if 0 < limit < 5000:
            with pytest.raises(PlanLoadError, match="Failed to parse JSON"):
                PlanLoader.load_file(str(path))
        else:
            # interpreter without a digit limit: the coordinate is parsed and then dropped
            doc = PlanLoader.load_file(str(path))
            assert doc.statistics.dropped_lines == 1

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(PlanLoadError, match="JSON object"):
            PlanLoader.load_file(str(path))

    def test_size_limit(self, tmp_path):
        path = tmp_path / "huge.json"
        with open(path, "wb") as f:
            f.truncate(MAX_FILE_SIZE_BYTES + 1)
        with pytest.raises(PlanLoadError, match="too large"):
            PlanLoader.load_file(str(path))

    def test_sample_plan_loads(self):
        doc = PlanLoader.load_file(str(SAMPLE_PLAN))
        assert doc.name.startswith("Level 1")
        assert doc.statistics.routes == 2
        assert doc.count(Category.ROUTE) == 6
        assert doc.statistics.dropped_lines == 2
