"""``.env`` loading for settings read by :mod:`toolhost.utils.config`."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

ENV_FILE_VAR = "TOOLHOST_ENV_FILE"

_loaded_from: Optional[Path] = None
_done = False


def load_env(*, dotenv_path: Optional[str | Path] = None) -> Optional[Path]:
    """Load ``TOOLHOST_*`` defaults from a dotenv file, once per process.

    The file is *dotenv_path*, else ``$TOOLHOST_ENV_FILE``, else the nearest ``.env``
    above the working directory. Variables already set in the process win. Returns
    the file that was read, or ``None`` when there was none.
    """

    global _loaded_from, _done
    if _done:
        return _loaded_from
    _done = True

    candidate = dotenv_path or os.getenv(ENV_FILE_VAR) or find_dotenv(usecwd=True)
    if not candidate or not Path(candidate).is_file():
        return None
    load_dotenv(dotenv_path=candidate, override=False)
    _loaded_from = Path(candidate)
    return _loaded_from


__all__ = ["ENV_FILE_VAR", "load_env"]
