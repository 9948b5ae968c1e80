from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Tuple, Union

# Objekttypen der Lane-Zeilen (#mmmTL:...), Zeichen an Position 4 (+ Subtyp an Position 5)
OBJ_BEATS_PER_MEASURE = "beats_per_measure"   # 0 / 2
OBJ_BPM_CHANGE = "bpm_change"                 # 0 / 8
OBJ_TAP = "tap"                               # 1
OBJ_HOLD = "hold"                             # 2
OBJ_SLIDE = "slide"                           # 3
OBJ_SLIDE2 = "slide2"                         # 4
OBJ_FLICK = "flick"                           # 5

# --- Pass 1: raw declarations ---

@dataclass
class MeasureDecl:
    measure: int
    beats_per_measure: float
    line_no: int = 0

@dataclass
class BpmDecl:
    bpm_id: int            # base-36, 0..1295
    bpm: float
    line_no: int = 0

@dataclass
class LaneLine:
    text: str
    measure: int
    object_type: str       # line[4]
    lane: str              # line[5]
    channel: Optional[str] # line[6], nur bei Slide-Zeilen belegt
    payload: str           # alles nach ':'
    category: Optional[str] = None
    line_no: int = 0

@dataclass
class ChartAnalysis:
    title: str = ""
    artist: str = ""
    designer: str = ""
    wave_offset_sec: float = 0.0
    measure_decls: List[MeasureDecl] = field(default_factory=list)
    bpm_decls: Dict[int, BpmDecl] = field(default_factory=dict)
    lane_lines: List[LaneLine] = field(default_factory=list)

# --- Pass 2: resolved timeline ---

@dataclass(frozen=True)
class SongInfo:
    title: str = ""
    artist: str = ""
    designer: str = ""
    wave_offset_sec: float = 0.0

@dataclass(frozen=True)
class MeasureAnchor:
    pos_measure: float
    beats_per_measure: float
    pos_beat: float
    pos_sec: float = 0.0

@dataclass(frozen=True)
class BPMAnchor:
    bpm_id: int
    bpm: float
    pos_beat: float
    pos_sec: float = 0.0

@dataclass(frozen=True)
class LaneEvent:
    pos_beat: float
    data: str              # 2-Zeichen-Payload eines Slots

@dataclass(frozen=True)
class Tap:
    lane: int              # 0..35
    width: int             # 1..36
    pos_beat: float
    pos_sec: float = 0.0
    tap_type: int = 1      # erstes Payload-Zeichen (normal / critical / ...)
    kind: str = field(default="tap", init=False)

@dataclass(frozen=True)
class Slide:
    start_lane: int
    start_width: int
    start_pos_beat: float
    end_lane: int
    end_width: int
    end_pos_beat: float
    start_pos_sec: float = 0.0
    end_pos_sec: float = 0.0
    channel: int = 0
    kind: str = field(default="slide", init=False)

Note = Union[Tap, Slide]

def first_time(note: Note) -> float:
    """Sortierschlüssel: Tap -> pos_sec, Slide -> start_pos_sec."""
    if note.kind == "tap":
        return note.pos_sec
    if note.kind == "slide":
        return note.start_pos_sec
    raise TypeError(f"unknown note kind: {note.kind!r}")

def first_beat(note: Note) -> float:
    if note.kind == "tap":
        return note.pos_beat
    if note.kind == "slide":
        return note.start_pos_beat
    raise TypeError(f"unknown note kind: {note.kind!r}")

@dataclass(frozen=True)
class SongData:
    info: SongInfo
    notes: Tuple[Note, ...]
    bpm_anchors: Tuple[BPMAnchor, ...]
    measure_anchors: Tuple[MeasureAnchor, ...]

    @property
    def taps(self) -> List[Tap]:
        return [n for n in self.notes if n.kind == "tap"]

    @property
    def slides(self) -> List[Slide]:
        return [n for n in self.notes if n.kind == "slide"]
