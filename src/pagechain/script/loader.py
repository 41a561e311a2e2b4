"""Load chain scripts from JSON files on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from pagechain.exceptions import ChainScriptError
from pagechain.script.models import ChainScript

logger = logging.getLogger(__name__)


def load_chain_script(path: Path | str) -> ChainScript:
    """Load and validate a single chain script.

    Raises:
        ChainScriptError: If the file is missing, not JSON, or does not
            match the ``ChainScript`` schema.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ChainScriptError(str(path), "file not found") from exc
    except json.JSONDecodeError as exc:
        raise ChainScriptError(str(path), f"not valid JSON ({exc.msg} at line {exc.lineno})") from exc

    try:
        script = ChainScript.model_validate(data)
    except ValidationError as exc:
        raise ChainScriptError(str(path), f"{exc.error_count()} validation error(s): {exc}") from exc

    logger.info("Loaded chain script %s (%d steps) from %s", script.name, len(script.steps), path.name)
    return script
