from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union
from .analyze import analyze_lines
from .config import get_encoding
from .errors import SusParseError
from .lanes import decode_lane_line
from .measures import build_measure_timeline
from .notes import NoteAssembler, to_seconds
from .tempo import build_bpm_timeline
from .timeline import ChartAnalysis, SongData, SongInfo, first_time, OBJ_BPM_CHANGE, OBJ_TAP, OBJ_SLIDE

logger = logging.getLogger(__name__)

def build_song(analysis: ChartAnalysis) -> SongData:
    """
    Pass 2: Taktarten -> Beat-Raum, BPM-Anker -> Sekunden,
    Lane-Zeilen -> Noten, dann alles in Sekunden projizieren und sortieren.
    """
    measures = build_measure_timeline(analysis.measure_decls)

    placement_lines = [ln for ln in analysis.lane_lines if ln.category == OBJ_BPM_CHANGE]
    tempo = build_bpm_timeline(analysis.bpm_decls, placement_lines, measures, analysis.wave_offset_sec)

    assembler = NoteAssembler()
    for line in analysis.lane_lines:
        if line.category in (OBJ_TAP, OBJ_SLIDE):
            assembler.feed(line, decode_lane_line(line, measures))

    notes = [to_seconds(n, tempo.beat_to_sec) for n in assembler.finish()]
    notes.sort(key=first_time)
    logger.debug("notes: %d", len(notes))

    info = SongInfo(
        title=analysis.title,
        artist=analysis.artist,
        designer=analysis.designer,
        wave_offset_sec=analysis.wave_offset_sec,
    )
    return SongData(
        info=info,
        notes=tuple(notes),
        bpm_anchors=tempo.anchors,
        measure_anchors=measures.with_seconds(tempo.beat_to_sec),
    )

def parse_sus(lines: Iterable[str]) -> SongData:
    """Ganze Datei (als Zeilen) -> zeitaufgelöste SongData."""
    return build_song(analyze_lines(lines))

def read_sus(path: Union[str, Path], cfg: Optional[Dict[str, Any]] = None) -> SongData:
    path = Path(path)
    encoding = get_encoding(cfg or {})
    try:
        text = path.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        raise SusParseError(f"chart is not valid {encoding}: {path}") from exc
    return parse_sus(text.splitlines())
