from pathlib import Path

import mido
import pytest

from susreader.process import parse_sus
from susreader.write import _timesig_from_beats, write_conductor_only, write_midi

CHART = [
    '#TITLE "Test Song"',
    "#00002:4",
    "#00202:3",
    "#BPM01:120",
    "#BPM02:150",
    "#00008:01",
    "#00108:02",
    "#00010:14001400",
    "#00313:14",
    "#00030a:1400",
    "#00135a:0023",
]


@pytest.mark.parametrize("beats, expected", [(4, (4, 4)), (3, (3, 4)), (3.5, (7, 8)), (0.75, (3, 16)), (0, None)])
def test_timesig_from_beats(beats: float, expected) -> None:
    assert _timesig_from_beats(beats) == expected


def test_write_midi(tmp_path: Path) -> None:
    song = parse_sus(CHART)
    out = tmp_path / "chart.mid"
    write_midi(song, str(out), {"midi": {"ticks_per_beat": 480, "base_note": 60}})

    mid = mido.MidiFile(str(out))
    assert mid.ticks_per_beat == 480
    assert len(mid.tracks) == 2

    conductor = mid.tracks[0]
    assert conductor.name == "Test Song"
    tempos = [msg.tempo for msg in conductor if msg.type == "set_tempo"]
    assert tempos == [500000, 400000]
    sigs = [(msg.numerator, msg.denominator) for msg in conductor if msg.type == "time_signature"]
    assert sigs == [(4, 4), (3, 4)]

    ons = [msg for msg in mid.tracks[1] if msg.type == "note_on"]
    assert len(ons) == len(song.notes)
    # Tap auf Lane 3 -> 60 + 3
    assert sorted({msg.note for msg in ons}) == [60, 63]


def test_write_midi_slide_spans_to_end(tmp_path: Path) -> None:
    song = parse_sus(["#00002:4", "#BPM01:120", "#00008:01", "#00030a:1400", "#00135a:0023"])
    out = tmp_path / "slide.mid"
    write_midi(song, str(out))

    tick = 0
    spans = {}
    for msg in mido.MidiFile(str(out)).tracks[1]:
        tick += msg.time
        if msg.type in ("note_on", "note_off"):
            spans.setdefault(msg.type, tick)
    assert spans == {"note_on": 0, "note_off": 6 * 480}


def test_write_conductor_only(tmp_path: Path) -> None:
    song = parse_sus(CHART)
    out = tmp_path / "conductor.mid"
    write_conductor_only(song, str(out))
    mid = mido.MidiFile(str(out))
    assert len(mid.tracks) == 1
    assert not [msg for msg in mid.tracks[0] if msg.type == "note_on"]
