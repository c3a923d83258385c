"""Persistent settings for Bunco.

Stores user preferences in ~/.bunco_settings.json.
No pygame dependency.
"""

import json
import os
import tempfile
from pathlib import Path

DEFAULTS = {
    "sound_enabled": True,
    "dark_mode": False,
    "probability_preset": "no_specials",
}


def _default_path():
    """Return the default path for the settings file."""
    return Path.home() / ".bunco_settings.json"


def load_settings(path=None):
    """Load settings from JSON file. Returns DEFAULTS on missing/corrupt.

    Merges with DEFAULTS so missing keys get default values.
    Unknown keys are ignored.
    """
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        data = json.loads(path.read_text())
        if not isinstance(data, dict):
            return dict(DEFAULTS)
        # Merge: only keep known keys, fill missing from defaults
        result = dict(DEFAULTS)
        for key in DEFAULTS:
            if key in data:
                result[key] = data[key]
        return result
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return dict(DEFAULTS)


def save_settings(settings, path=None):
    """Write settings dict to JSON atomically. Silently ignores write errors."""
    if path is None:
        path = _default_path()
    path = Path(path)
    try:
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(json.dumps(settings, indent=2))
            os.replace(tmp, path)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
    except OSError:
        pass  # Settings are best-effort
