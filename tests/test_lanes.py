import pytest

from susreader.analyze import parse_lane_line
from susreader.lanes import decode_lane_line
from susreader.measures import build_measure_timeline
from susreader.timeline import LaneEvent, MeasureDecl


@pytest.fixture
def measures():
    return build_measure_timeline([MeasureDecl(0, 4.0), MeasureDecl(2, 3.0)])


def test_decode_skips_empty_slots(measures) -> None:
    events = decode_lane_line("#00110:10002000", measures)
    assert events == [LaneEvent(4.0, "10"), LaneEvent(6.0, "20")]


def test_decode_accepts_parsed_line(measures) -> None:
    line = parse_lane_line("#00210:001400000000", line_no=3)
    events = decode_lane_line(line, measures)
    # Slot 1 von 6 in Takt 2 (3 Beats pro Takt)
    assert len(events) == 1
    assert events[0].pos_beat == pytest.approx(8.5)
    assert events[0].data == "14"


def test_decode_all_empty(measures) -> None:
    assert decode_lane_line("#00010:00000000", measures) == []


def test_decode_ignores_trailing_odd_character(measures) -> None:
    assert decode_lane_line("#00010:141", measures) == [LaneEvent(0.0, "14")]


def test_decode_keeps_slot_order(measures) -> None:
    events = decode_lane_line("#00010:1112131415161718", measures)
    assert [e.data for e in events] == ["11", "12", "13", "14", "15", "16", "17", "18"]
    assert [e.pos_beat for e in events] == sorted(e.pos_beat for e in events)
