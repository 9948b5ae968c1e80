from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Tuple
import mido
from .config import get_midi_settings
from .timeline import SongData, Note, BPMAnchor, MeasureAnchor

# ---------- interne Helfer ----------

def _bpm_to_micro(bpm: float) -> int:
    return int(round(60_000_000 / max(1e-6, abs(float(bpm)))))

def _beat_to_tick(beat: float, tpb: int) -> int:
    return max(0, int(round(float(beat) * tpb)))

def _timesig_from_beats(beats: float) -> Optional[Tuple[int, int]]:
    """4 -> 4/4, 3.5 -> 7/8, 0.75 -> 3/16. None, wenn nicht darstellbar."""
    if beats <= 0:
        return None
    num, den = float(beats), 4
    while abs(num - round(num)) > 1e-9 and den < 64:
        num *= 2
        den *= 2
    if abs(num - round(num)) > 1e-9 or not (1 <= round(num) <= 255):
        return None
    return int(round(num)), den

def _emit_conductor(track: mido.MidiTrack, tempos: Iterable[BPMAnchor],
                    timesigs: Iterable[MeasureAnchor], tpb: int):
    """Schreibt Tempo- und Takt-Metaevents in einen Track (sortiert & delta-times)."""
    events = []
    for a in tempos:
        events.append((_beat_to_tick(a.pos_beat, tpb), ("tempo", a.bpm)))
    for m in timesigs:
        ts = _timesig_from_beats(m.beats_per_measure)
        if ts is not None:
            events.append((_beat_to_tick(m.pos_beat, tpb), ("timesig", ts)))
    # Reihenfolge: TimeSig vor Tempo bei gleichem Tick
    events.sort(key=lambda x: (x[0], 0 if x[1][0] == "timesig" else 1))
    last = 0
    for tick, payload in events:
        delta = tick - last
        last = tick
        kind = payload[0]
        if kind == "tempo":
            track.append(mido.MetaMessage("set_tempo", tempo=_bpm_to_micro(payload[1]), time=delta))
        elif kind == "timesig":
            num, den = payload[1]
            track.append(mido.MetaMessage("time_signature", numerator=num, denominator=den, time=delta))

def _note_spans(notes: Iterable[Note], settings: Dict[str, Any]) -> List[Tuple[int, int, int]]:
    """(start_tick, end_tick, pitch) je Note; Slides von Start- bis End-Beat."""
    tpb = settings["ticks_per_beat"]
    tap_len = max(1, int(round(settings["tap_length_beats"] * tpb)))
    spans = []
    for n in notes:
        if n.kind == "tap":
            start = _beat_to_tick(n.pos_beat, tpb)
            end = start + tap_len
            lane = n.lane
        elif n.kind == "slide":
            start = _beat_to_tick(n.start_pos_beat, tpb)
            end = max(start + 1, _beat_to_tick(n.end_pos_beat, tpb))
            lane = n.start_lane
        else:
            continue
        pitch = max(0, min(127, settings["base_note"] + lane))
        spans.append((start, end, pitch))
    return spans

def _emit_track_events(mt: mido.MidiTrack, spans: Iterable[Tuple[int, int, int]],
                       velocity: int, channel: int):
    """Schreibt Note-Events als delta-times in einen Track."""
    evs = []
    for start, end, pitch in spans:
        evs.append((start, 1, "on", pitch))
        evs.append((end, 0, "off", pitch))  # Off zuerst bei gleichem Tick
    evs.sort(key=lambda x: (x[0], x[1]))

    last = 0
    for tick, _, kind, pitch in evs:
        delta = tick - last
        last = tick
        if kind == "on":
            mt.append(mido.Message("note_on", note=pitch, velocity=velocity, channel=channel, time=delta))
        else:
            mt.append(mido.Message("note_off", note=pitch, velocity=0, channel=channel, time=delta))

def _track_name(title: str, fallback: str) -> str:
    # mido schreibt Meta-Texte als latin1
    try:
        title.encode("latin-1")
    except UnicodeEncodeError:
        return fallback
    return title or fallback

def _conductor_track(song: SongData, tpb: int) -> mido.MidiTrack:
    t_con = mido.MidiTrack()
    name = _track_name(song.info.title, "Conductor")
    t_con.append(mido.MetaMessage("track_name", name=name, time=0))
    _emit_conductor(t_con, song.bpm_anchors, song.measure_anchors, tpb)
    return t_con

# ---------- öffentliche Writer-APIs ----------

def write_midi(song: SongData, out_path: str, cfg: Optional[Dict[str, Any]] = None):
    """
    Eine Datei mit Conductor-Track (Tempo/Takt) + Notentrack.
    Lane -> Tonhöhe (base_note + lane). WAVEOFFSET ist in MIDI nicht darstellbar.
    """
    settings = get_midi_settings(cfg or {})
    tpb = settings["ticks_per_beat"]
    mid = mido.MidiFile(ticks_per_beat=tpb)
    mid.tracks.append(_conductor_track(song, tpb))

    mt = mido.MidiTrack()
    mt.append(mido.MetaMessage("track_name", name="Notes", time=0))
    _emit_track_events(mt, _note_spans(song.notes, settings), settings["velocity"], settings["channel"])
    mid.tracks.append(mt)

    mid.save(out_path)

def write_conductor_only(song: SongData, out_path: str, cfg: Optional[Dict[str, Any]] = None):
    """Nur Conductor: Tempo/Takt in einer separaten MIDI (kein Notentrack)."""
    settings = get_midi_settings(cfg or {})
    tpb = settings["ticks_per_beat"]
    mid = mido.MidiFile(ticks_per_beat=tpb)
    mid.tracks.append(_conductor_track(song, tpb))
    mid.save(out_path)
