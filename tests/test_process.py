"""End-to-end: chart text -> SongData."""

import pytest

from susreader.errors import SusParseError
from susreader.process import parse_sus, read_sus
from susreader.timeline import first_time

HEADER = [
    '#TITLE "Test Song"',
    '#ARTIST "someone"',
    '#DESIGNER "me"',
    '#REQUEST "ticks_per_beat 480"',
    "#00002:4",
    "#BPM01:120",
    "#00008:01",
]


def _song(*lines: str, header=HEADER):
    return parse_sus(list(header) + list(lines))


def test_tap_at_beat_two_is_one_second() -> None:
    song = _song("#00010:00001400")
    (tap,) = song.notes
    assert tap.pos_beat == 2.0
    assert tap.pos_sec == pytest.approx(1.0)


def test_wave_offset_moves_time_origin() -> None:
    song = _song("#WAVEOFFSET 10", "#00010:14")
    assert song.info.wave_offset_sec == 10.0
    assert song.bpm_anchors[0].pos_sec == pytest.approx(-10.0)
    assert song.notes[0].pos_sec == pytest.approx(-10.0)


def test_metadata() -> None:
    info = _song().info
    assert (info.title, info.artist, info.designer) == ("Test Song", "someone", "me")


def test_slide_start_and_end_from_two_lines() -> None:
    song = _song("#00030a:1400", "#00135a:0023")
    (slide,) = song.slides
    assert (slide.start_lane, slide.start_pos_beat) == (0, 0.0)
    assert (slide.end_lane, slide.end_pos_beat) == (5, 6.0)
    assert slide.start_pos_sec == pytest.approx(0.0)
    assert slide.end_pos_sec == pytest.approx(3.0)
    assert slide.end_pos_beat >= slide.start_pos_beat


def test_notes_sorted_by_first_time() -> None:
    song = _song(
        "#00110:14",          # Beat 4
        "#00030a:00140000",   # Slide-Start Beat 1
        "#00010:14",          # Beat 0
        "#00130a:0024",       # Slide-Ende Beat 6
        "#00012:00000014",    # Beat 3
    )
    assert [n.kind for n in song.notes] == ["tap", "slide", "tap", "tap"]
    times = [first_time(n) for n in song.notes]
    assert times == sorted(times)
    assert times == pytest.approx([0.0, 0.5, 1.5, 2.0])


def test_bpm_change_and_time_signature_change() -> None:
    song = _song(
        "#BPM02:240",
        "#00108:02",          # 240 BPM ab Beat 4 (= 2 s)
        "#00202:3",           # ab Takt 2: 3 Beats pro Takt
        "#00310:14",          # Takt 3 -> Beat 11
    )
    assert [a.bpm for a in song.bpm_anchors] == [120.0, 240.0]
    assert song.bpm_anchors[1].pos_sec == pytest.approx(2.0)
    assert [a.pos_beat for a in song.measure_anchors] == [0.0, 8.0]
    assert song.measure_anchors[1].pos_sec == pytest.approx(3.0)
    (tap,) = song.notes
    assert tap.pos_beat == pytest.approx(11.0)
    assert tap.pos_sec == pytest.approx(3.75)


def test_unrecognized_and_unsupported_lines_are_ignored() -> None:
    song = _song("comment line", "#00020a:14", "#00050:13", "#HISPEED 1.0", "#00010:14")
    assert len(song.notes) == 1
    assert len(song.taps) == 1


def test_parse_is_deterministic() -> None:
    lines = HEADER + ["#00010:1414", "#00030a:1400", "#00135a:0023", "#00011:00140014"]
    assert parse_sus(lines) == parse_sus(lines)


def test_incomplete_slide_not_emitted() -> None:
    song = _song("#00010:14", "#00030a:0014")
    assert [n.kind for n in song.notes] == ["tap"]


def test_missing_measure_declaration_fails() -> None:
    with pytest.raises(SusParseError):
        parse_sus(["#BPM01:120", "#00008:01", "#00010:14"])


def test_missing_bpm_fails() -> None:
    with pytest.raises(SusParseError):
        parse_sus(["#00002:4", "#00010:14"])


def test_read_sus_from_file_with_bom(tmp_path) -> None:
    path = tmp_path / "chart.sus"
    path.write_text("\r\n".join(HEADER + ["#00010:00001400"]) + "\r\n", encoding="utf-8-sig")
    song = read_sus(path)
    assert song.info.title == "Test Song"
    assert song.notes[0].pos_sec == pytest.approx(1.0)


def test_read_sus_rejects_wrong_encoding(tmp_path) -> None:
    path = tmp_path / "chart.sus"
    path.write_bytes(b"#TITLE \"\xff\xfe\"\n")
    with pytest.raises(SusParseError):
        read_sus(path, {"encoding": "utf-8"})
