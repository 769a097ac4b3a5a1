from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

import typer

logger = logging.getLogger(__name__)


def marshal_json(obj) -> str:
    return json.dumps(obj, indent=2, default=str) + "\n"


def decode_fields(
    data: dict,
    known: Iterable[str],
    where: str,
    warn: Optional[Callable[[str], None]] = None,
) -> dict:
    """
    Two-tier decode of a JSON object.
    Strict: every key is known -> data is returned as-is.
    Lenient: unknown keys are reported once through `warn` and dropped.
    """
    known = set(known)
    unknown = [k for k in data if k not in known]
    if not unknown:
        return data
    sink = warn or logger.warning
    sink(f"unknown field(s) {', '.join(sorted(unknown))} in {where}")
    return {k: v for k, v in data.items() if k in known}


def unmarshal_json(
    text: str,
    known: Iterable[str],
    where: str,
    warn: Optional[Callable[[str], None]] = None,
) -> dict:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{where}: expected a JSON object, got {type(data).__name__}")
    return decode_fields(data, known, where, warn=warn)


def save_file(path: Path, content: str, confirm: Callable[..., bool] = typer.confirm) -> bool:
    path = Path(path)
    if path.exists() and not confirm(f"Overwrite existing file {path}?", default=False):
        logger.info(f"kept existing file {path}")
        return False
    path.write_text(content, encoding="utf-8")
    logger.info(f"saved {path}")
    return True
