# src/susreader/analyze.py
from __future__ import annotations
import enum
import logging
import re
from typing import Iterable, Optional, Tuple
from .errors import SusParseError
from .timeline import (
    ChartAnalysis, MeasureDecl, BpmDecl, LaneLine,
    OBJ_BEATS_PER_MEASURE, OBJ_BPM_CHANGE, OBJ_TAP, OBJ_HOLD, OBJ_SLIDE, OBJ_SLIDE2, OBJ_FLICK,
)
from .util.base36 import b36

logger = logging.getLogger(__name__)

# ex) #BPM01:120
RE_BPM = re.compile(r"^#BPM([0-9A-Za-z]{2}):\s*(\S+)\s*$")
# ex) #WAVEOFFSET 10
RE_WAVEOFFSET = re.compile(r"^#WAVEOFFSET\s+(\S+)\s*$")
# ex) #00002:4
RE_BEATS_PER_MEASURE = re.compile(r"^#(\d{3})02:\s*(\S+)\s*$")
# ex) #TITLE "Song"
RE_META = re.compile(r'^#(TITLE|ARTIST|DESIGNER)\s+(.*?)\s*$')
# ex) #00010:0014  /  #00032a:1300002300
RE_LANE = re.compile(r"^#(\d{3})([0-9A-Za-z]{2,}):\s*([0-9A-Za-z]+)\s*$")


class LineKind(enum.Enum):
    BPM = "bpm"
    WAVE_OFFSET = "wave_offset"
    BEATS_PER_MEASURE = "beats_per_measure"
    METADATA = "metadata"
    LANE_EVENT = "lane_event"
    UNKNOWN = "unknown"


_PATTERNS = (
    (LineKind.BPM, RE_BPM),
    (LineKind.WAVE_OFFSET, RE_WAVEOFFSET),
    (LineKind.BEATS_PER_MEASURE, RE_BEATS_PER_MEASURE),
    (LineKind.METADATA, RE_META),
    (LineKind.LANE_EVENT, RE_LANE),
)

def _match_line(line: str) -> Tuple[LineKind, Optional[re.Match]]:
    # Reihenfolge zählt: #00002:4 passt auch auf RE_LANE
    for kind, pattern in _PATTERNS:
        m = pattern.match(line)
        if m:
            return kind, m
    return LineKind.UNKNOWN, None

def classify_line(line: str) -> LineKind:
    return _match_line(line.rstrip())[0]

def object_category(object_type: str, subtype: str) -> Optional[str]:
    """
    0: Sonstiges (02 = Takt, 08 = BPM-Wechsel)
    1: tap, 2: hold, 3: slide1, 4: slide2, 5: flick
    """
    if object_type == "0":
        if subtype == "2":
            return OBJ_BEATS_PER_MEASURE
        if subtype == "8":
            return OBJ_BPM_CHANGE
        return None
    return {
        "1": OBJ_TAP,
        "2": OBJ_HOLD,
        "3": OBJ_SLIDE,
        "4": OBJ_SLIDE2,
        "5": OBJ_FLICK,
    }.get(object_type)

def _float(text: str, what: str, line_no: int) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise SusParseError(f"invalid {what}: {text!r}", line_no) from exc

def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text

def parse_lane_line(line: str, line_no: int = 0) -> LaneLine:
    """Zerlegt '#mmmTL[C]:payload' in Takt, Objekttyp, Lane, Kanal und Payload."""
    text = line.rstrip()
    m = RE_LANE.match(text)
    if not m:
        raise SusParseError(f"not a lane event line: {text!r}", line_no)
    head = "#" + m.group(1) + m.group(2)
    object_type = head[4]
    lane = head[5]
    channel = head[6] if len(head) > 6 else None
    return LaneLine(
        text=text,
        measure=int(m.group(1)),
        object_type=object_type,
        lane=lane,
        channel=channel,
        payload=m.group(3),
        category=object_category(object_type, lane),
        line_no=line_no,
    )

def analyze_lines(lines: Iterable[str]) -> ChartAnalysis:
    """
    Pass 1: jede Zeile einmal klassifizieren und nach Kategorie einsammeln.
    Lane-Zeilen bleiben in Dateireihenfolge (Slide-Kanäle hängen davon ab).
    """
    analysis = ChartAnalysis()
    skipped = 0

    for idx, raw in enumerate(lines):
        line_no = idx + 1
        line = raw.rstrip()
        if idx == 0:
            line = line.lstrip("\ufeff")
        kind, m = _match_line(line)

        if kind is LineKind.BPM:
            bpm_id = b36(m.group(1))
            bpm = _float(m.group(2), "BPM value", line_no)
            analysis.bpm_decls[bpm_id] = BpmDecl(bpm_id=bpm_id, bpm=bpm, line_no=line_no)
        elif kind is LineKind.WAVE_OFFSET:
            analysis.wave_offset_sec = _float(m.group(1), "wave offset", line_no)
        elif kind is LineKind.BEATS_PER_MEASURE:
            analysis.measure_decls.append(MeasureDecl(
                measure=int(m.group(1)),
                beats_per_measure=_float(m.group(2), "beats per measure", line_no),
                line_no=line_no,
            ))
        elif kind is LineKind.METADATA:
            setattr(analysis, m.group(1).lower(), _unquote(m.group(2)))
        elif kind is LineKind.LANE_EVENT:
            analysis.lane_lines.append(parse_lane_line(line, line_no))
        else:
            skipped += 1

    logger.debug(
        "analyzed: measures=%d bpms=%d lane_lines=%d skipped=%d",
        len(analysis.measure_decls), len(analysis.bpm_decls), len(analysis.lane_lines), skipped,
    )
    return analysis
