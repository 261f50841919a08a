# buildtask/core/domain/cultures.py
from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Optional

import structlog

from buildtask.shared.config import settings

logger = structlog.get_logger()

CULTURES_FILE = Path(__file__).resolve().parents[2] / "shared" / "data" / "cultures.json"


def load_culture_names(path: Path = CULTURES_FILE) -> FrozenSet[str]:
    """Loads the packaged culture catalogue."""
    if not path.exists():
        logger.warning("culture_catalogue_not_found", path=str(path))
        return frozenset()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.error("culture_catalogue_corrupt", path=str(path), error=str(e))
        return frozenset()

    names = data.get("cultures", []) if isinstance(data, dict) else []
    return frozenset(str(n) for n in names if n)


@lru_cache(maxsize=1)
def culture_names() -> FrozenSet[str]:
    """
    Process-wide set of recognised culture tags.
    Built once on first use and never mutated afterwards.
    """
    names = load_culture_names() | frozenset(c for c in settings.EXTRA_CULTURES if c)
    logger.debug("culture_catalogue_loaded", count=len(names))
    return names


def detect_culture(path: str) -> Optional[str]:
    """
    Return the culture tag embedded in a file name, if any.

    'Strings.fr-FR.resx' -> 'fr-FR'; 'Strings.resx' -> None. The candidate is
    the segment after the last '.' of the name without its extension; it
    must be non-empty and a member of the culture set.
    """
    stem = os.path.splitext(os.path.basename(path))[0]
    index = stem.rfind(".")
    if index < 0:
        return None
    candidate = stem[index + 1:]
    if candidate and candidate in culture_names():
        return candidate
    return None
