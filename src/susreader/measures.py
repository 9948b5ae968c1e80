from __future__ import annotations
import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Sequence, Tuple
from .errors import SusParseError
from .timeline import MeasureDecl, MeasureAnchor
from .util.interp import PiecewiseLinear, integrate_anchors

logger = logging.getLogger(__name__)

class MeasureTimeline:
    """Takt -> Beat, stückweise linear über den Taktart-Ankern."""

    def __init__(self, anchors: Sequence[MeasureAnchor]):
        if not anchors:
            raise SusParseError("measure timeline needs at least one beats-per-measure declaration")
        self.anchors: Tuple[MeasureAnchor, ...] = tuple(anchors)
        self._curve = PiecewiseLinear(
            [a.pos_measure for a in self.anchors],
            [a.pos_beat for a in self.anchors],
            [a.beats_per_measure for a in self.anchors],
        )

    def measure_to_beat(self, measure: float) -> float:
        return self._curve(measure)

    def with_seconds(self, beat_to_sec: Callable[[float], float]) -> Tuple[MeasureAnchor, ...]:
        return tuple(replace(a, pos_sec=beat_to_sec(a.pos_beat)) for a in self.anchors)

def build_measure_timeline(decls: Iterable[MeasureDecl]) -> MeasureTimeline:
    # doppelte Taktnummer: letzte Deklaration gewinnt
    by_measure: Dict[int, float] = {}
    for d in decls:
        if d.measure in by_measure:
            logger.debug("measure %d redeclared at line %d", d.measure, d.line_no)
        by_measure[d.measure] = float(d.beats_per_measure)

    if not by_measure:
        raise SusParseError("no beats-per-measure declaration (#mmm02:) found")

    measures = sorted(by_measure)
    rates = [by_measure[m] for m in measures]
    beats = integrate_anchors(measures, rates, origin=0.0)

    anchors = [
        MeasureAnchor(pos_measure=float(m), beats_per_measure=r, pos_beat=b)
        for m, r, b in zip(measures, rates, beats)
    ]
    logger.debug("measure anchors: %d", len(anchors))
    return MeasureTimeline(anchors)
