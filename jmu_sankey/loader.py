"""JSON data loading."""

import json
import logging
from pathlib import Path
from typing import Any

from jmu_sankey.errors import DataLoadError

logger = logging.getLogger(__name__)


def load_json(path: Path) -> dict[str, Any]:
    """Read and parse a JSON document.

    Raises:
        DataLoadError: file missing, unreadable, not valid JSON, or not an object.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DataLoadError(str(path), e.strerror or str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataLoadError(str(path), f"invalid JSON at line {e.lineno}: {e.msg}") from e

    if not isinstance(data, dict):
        raise DataLoadError(str(path), f"expected a JSON object, got {type(data).__name__}")

    logger.debug("Loaded %s (%d top-level keys)", path, len(data))
    return data
