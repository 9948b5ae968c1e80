# src/susreader/config.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging
import yaml

logger = logging.getLogger(__name__)

# Paket-Root: .../src/susreader
PKG_ROOT = Path(__file__).resolve().parent
DEFAULT_CFG_PATH = PKG_ROOT / "config.default.yaml"
USER_CFG_PATH = Path.home() / ".config" / "susreader" / "config.yaml"

MIDI_DEFAULTS: Dict[str, Any] = {
    "ticks_per_beat": 480,
    "base_note": 48,
    "tap_length_beats": 0.25,
    "velocity": 100,
    "channel": 0,
}

def _safe_load(path: Path) -> Dict[str, Any]:
    try:
        if path.exists():
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        # lieber leer zurückgeben als den Core zu crashen
        logger.warning("ignoring unreadable config %s: %s", path, exc)
    return {}

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out

def load_config(
    user_path: Optional[Path] = None,
    default_path: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Lädt Default + User-Overrides und liefert ein gemergtes Dict.
    Enthält 'encoding' (top-level) und den Block 'midi' für den Export.
    Der Timing-Kern selbst ist konfigurationsfrei.
    """
    dpath = Path(default_path) if default_path else DEFAULT_CFG_PATH
    upath = Path(user_path) if user_path else USER_CFG_PATH

    defaults = _safe_load(dpath)
    user = _safe_load(upath)
    cfg = _deep_merge(defaults, user)

    # Minimal-Defaults sicherstellen
    cfg.setdefault("encoding", "utf-8-sig")
    cfg["midi"] = _deep_merge(MIDI_DEFAULTS, cfg.get("midi") if isinstance(cfg.get("midi"), dict) else {})

    return cfg

def get_encoding(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("encoding") or "utf-8-sig")

def get_midi_settings(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """MIDI-Block mit Fallbacks, Zahlen schon konvertiert."""
    raw = _deep_merge(MIDI_DEFAULTS, (cfg or {}).get("midi") or {})
    try:
        return {
            "ticks_per_beat": int(raw["ticks_per_beat"]),
            "base_note": int(raw["base_note"]),
            "tap_length_beats": float(raw["tap_length_beats"]),
            "velocity": int(raw["velocity"]),
            "channel": int(raw["channel"]),
        }
    except (TypeError, ValueError):
        logger.warning("invalid midi settings %r, using defaults", raw)
        return dict(MIDI_DEFAULTS)
