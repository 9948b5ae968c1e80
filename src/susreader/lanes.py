from __future__ import annotations
from typing import List, Union
from .analyze import parse_lane_line
from .measures import MeasureTimeline
from .timeline import LaneLine, LaneEvent

EMPTY_SLOT = "00"

def decode_lane_line(line: Union[LaneLine, str], measures: MeasureTimeline) -> List[LaneEvent]:
    """
    Payload in 2-Zeichen-Slots zerlegen; Slot i von n liegt bei Takt + i/n.
    '00' = kein Objekt. Ergebnis in Slot-Reihenfolge (= zeitlich sortiert).
    """
    if isinstance(line, str):
        line = parse_lane_line(line)

    payload = line.payload
    size = len(payload) // 2
    events: List[LaneEvent] = []
    for i in range(size):
        data = payload[i * 2:i * 2 + 2]
        if data == EMPTY_SLOT:
            continue
        events.append(LaneEvent(
            pos_beat=measures.measure_to_beat(line.measure + i / size),
            data=data,
        ))
    return events
