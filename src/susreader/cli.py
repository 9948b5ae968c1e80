from __future__ import annotations
import argparse, logging, pathlib, sys, traceback
from typing import List
from . import write
from .config import load_config
from .errors import SusError
from .process import read_sus
from .timeline import Note, SongData

def format_note(note: Note) -> str:
    if note.kind == "tap":
        return f"{note.pos_sec:g}"
    if note.kind == "slide":
        return f"{note.start_pos_sec:g} : {note.end_pos_sec:g}"
    return ""

def format_timeline(song: SongData) -> List[str]:
    return [format_note(n) for n in song.notes]

def main(argv=None):
    p = argparse.ArgumentParser(description="SUS chart -> time-resolved notes (seconds)")
    p.add_argument("--in", dest="infile", required=True, help="Input chart (.sus)")
    p.add_argument("--midi", dest="midi_out", default=None, help="Also write notes + tempo map as MIDI (.mid)")
    p.add_argument("--conductor-out", dest="conductor_out", default=None, help="Write a conductor-only MIDI (tempo/time signatures)")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log parser details to stderr")

    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(name)s] %(levelname)s: %(message)s")

    in_path = pathlib.Path(args.infile).expanduser().resolve()
    if not in_path.exists():
        print(f"[cli] ERROR: Input not found: {in_path}", file=sys.stderr)
        sys.exit(1)

    cfg = load_config(args.config)
    print(f"[cli] infile = {in_path}")

    try:
        song = read_sus(in_path, cfg)
    except SusError:
        traceback.print_exc()
        sys.exit(2)

    # Timeline: Tap -> Sekunden, Slide -> "start : end"
    for line in format_timeline(song):
        print(line)

    if args.midi_out:
        out_path = pathlib.Path(args.midi_out).expanduser().resolve()
        write.write_midi(song, str(out_path), cfg)
        print(f"[cli] midi      -> {out_path}")

    if args.conductor_out:
        cond_path = pathlib.Path(args.conductor_out).expanduser().resolve()
        write.write_conductor_only(song, str(cond_path), cfg)
        print(f"[cli] conductor -> {cond_path}")

    print(f"[cli] Done. notes={len(song.notes)} bpm_changes={len(song.bpm_anchors)} measures={len(song.measure_anchors)}")

if __name__ == "__main__":
    main()
