from __future__ import annotations
import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple
from .errors import SusParseError
from .lanes import decode_lane_line
from .measures import MeasureTimeline
from .timeline import BpmDecl, BPMAnchor, LaneLine
from .util.base36 import b36, to_b36
from .util.interp import PiecewiseLinear, integrate_anchors

logger = logging.getLogger(__name__)

def _sec_per_beat(bpm: float) -> float:
    return 60.0 / float(bpm)

class BpmTimeline:
    """
    Beat -> Sekunden über den BPM-Ankern.
    Vor dem ersten Anker: -wave_offset + beat * 60 / bpm[0].
    """

    def __init__(self, anchors: Sequence[BPMAnchor], wave_offset_sec: float = 0.0):
        if not anchors:
            raise SusParseError("BPM timeline needs at least one BPM declaration")
        self.anchors: Tuple[BPMAnchor, ...] = tuple(anchors)
        self.wave_offset_sec = float(wave_offset_sec)
        self._curve = PiecewiseLinear(
            [a.pos_beat for a in self.anchors],
            [a.pos_sec for a in self.anchors],
            [_sec_per_beat(a.bpm) for a in self.anchors],
            origin=-self.wave_offset_sec,
        )

    def beat_to_sec(self, beat: float) -> float:
        return self._curve(beat)

def resolve_bpm_positions(
    decls: Dict[int, BpmDecl],
    placement_lines: Iterable[LaneLine],
    measures: MeasureTimeline,
) -> Dict[int, Optional[float]]:
    """BPM-Wechsel-Zeilen (#mmm08:) -> Beat-Position je BPM-ID; spätere Platzierung gewinnt."""
    positions: Dict[int, Optional[float]] = {bpm_id: None for bpm_id in decls}
    for line in placement_lines:
        for obj in decode_lane_line(line, measures):
            bpm_id = b36(obj.data)
            if bpm_id not in decls:
                raise SusParseError(f"BPM id {obj.data!r} is placed but never declared", line.line_no)
            positions[bpm_id] = obj.pos_beat
    return positions

def build_bpm_timeline(
    decls: Dict[int, BpmDecl],
    placement_lines: Iterable[LaneLine],
    measures: MeasureTimeline,
    wave_offset_sec: float = 0.0,
) -> BpmTimeline:
    if not decls:
        raise SusParseError("no BPM declaration (#BPMxx:) found")

    positions = resolve_bpm_positions(decls, placement_lines, measures)

    # nach ID (wie std::map), dann stabil nach Beat
    ordered = []
    for bpm_id in sorted(positions):
        pos_beat = positions[bpm_id]
        if pos_beat is None:
            logger.warning("BPM id %s (line %d) is declared but never placed; using beat 0",
                           to_b36(bpm_id), decls[bpm_id].line_no)
            pos_beat = 0.0
        ordered.append((bpm_id, decls[bpm_id].bpm, pos_beat))
    ordered.sort(key=lambda x: x[2])

    for bpm_id, bpm, _ in ordered:
        if bpm == 0.0:
            raise SusParseError(f"BPM must not be 0 (id {to_b36(bpm_id)})", decls[bpm_id].line_no)

    secs = integrate_anchors(
        [x[2] for x in ordered],
        [_sec_per_beat(x[1]) for x in ordered],
        origin=-float(wave_offset_sec),
    )
    anchors = [
        BPMAnchor(bpm_id=bpm_id, bpm=bpm, pos_beat=pos_beat, pos_sec=sec)
        for (bpm_id, bpm, pos_beat), sec in zip(ordered, secs)
    ]
    logger.debug("bpm anchors: %d", len(anchors))
    return BpmTimeline(anchors, wave_offset_sec)
