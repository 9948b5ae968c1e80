from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Sequence
from .errors import SusParseError
from .timeline import LaneLine, LaneEvent, Note, Tap, Slide, OBJ_TAP, OBJ_SLIDE
from .util.base36 import b36

logger = logging.getLogger(__name__)

SLIDE_START = "1"
SLIDE_END = "2"

@dataclass
class OpenSlide:
    channel: int
    start_lane: int
    start_width: int
    start_pos_beat: float
    line_no: int = 0

def _lane_of(line: LaneLine) -> int:
    try:
        return b36(line.lane)
    except ValueError as exc:
        raise SusParseError(f"invalid lane {line.lane!r}", line.line_no) from exc

def _width_of(obj: LaneEvent, line: LaneLine) -> int:
    # Breite = zweites Payload-Zeichen (base 36)
    try:
        return b36(obj.data[1])
    except ValueError as exc:
        raise SusParseError(f"invalid width in slot {obj.data!r}", line.line_no) from exc

class NoteAssembler:
    """
    Baut Taps direkt und Slides über Kanalpaare (Start '1' / Ende '2').

    `open_channels` hält Slides, die in einer früheren Zeile begonnen wurden.
    Pro Zeile werden Starts erst in eine lokale Map geschrieben; was am
    Zeilenende noch offen ist, wandert danach in `open_channels`.
    """

    def __init__(self) -> None:
        self.notes: List[Note] = []
        self.open_channels: Dict[int, OpenSlide] = {}

    def feed(self, line: LaneLine, objects: Sequence[LaneEvent]) -> None:
        if line.category == OBJ_TAP:
            self._add_taps(line, objects)
        elif line.category == OBJ_SLIDE:
            self._add_slides(line, objects)

    def _add_taps(self, line: LaneLine, objects: Sequence[LaneEvent]) -> None:
        lane = _lane_of(line)
        for obj in objects:
            self.notes.append(Tap(
                lane=lane,
                width=_width_of(obj, line),
                pos_beat=obj.pos_beat,
                tap_type=b36(obj.data[0]),
            ))

    def _add_slides(self, line: LaneLine, objects: Sequence[LaneEvent]) -> None:
        if line.channel is None:
            raise SusParseError(f"slide line without channel: {line.text!r}", line.line_no)
        channel = b36(line.channel)
        lane = _lane_of(line)
        local: Dict[int, OpenSlide] = {}

        for obj in objects:
            head = obj.data[0]
            if head == SLIDE_START:
                local[channel] = OpenSlide(
                    channel=channel,
                    start_lane=lane,
                    start_width=_width_of(obj, line),
                    start_pos_beat=obj.pos_beat,
                    line_no=line.line_no,
                )
            elif head == SLIDE_END:
                if channel in local:
                    start = local.pop(channel)
                elif channel in self.open_channels:
                    start = self.open_channels.pop(channel)
                else:
                    raise SusParseError(f"slide end on channel {line.channel!r} without a start", line.line_no)
                self.notes.append(Slide(
                    start_lane=start.start_lane,
                    start_width=start.start_width,
                    start_pos_beat=start.start_pos_beat,
                    end_lane=lane,
                    end_width=_width_of(obj, line),
                    end_pos_beat=obj.pos_beat,
                    channel=channel,
                ))
            # andere Slot-Typen (Relay, Kurvenpunkte) werden ignoriert

        self.open_channels.update(local)

    def finish(self) -> List[Note]:
        """Fertige Noten; noch offene Kanäle werden verworfen."""
        for channel, slide in sorted(self.open_channels.items()):
            logger.warning("slide on channel %d started at line %d is never closed; dropped",
                           channel, slide.line_no)
        return list(self.notes)

def to_seconds(note: Note, beat_to_sec: Callable[[float], float]) -> Note:
    if note.kind == "tap":
        return replace(note, pos_sec=beat_to_sec(note.pos_beat))
    if note.kind == "slide":
        return replace(
            note,
            start_pos_sec=beat_to_sec(note.start_pos_beat),
            end_pos_sec=beat_to_sec(note.end_pos_beat),
        )
    raise TypeError(f"unknown note kind: {note.kind!r}")
