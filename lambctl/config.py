from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from lambctl.jsonutil import unmarshal_json

logger = logging.getLogger(__name__)

FUNCTION_FILENAMES = ("function.json", "function.jsonnet")


class FunctionConfigError(Exception):
    pass


class EnvironmentConfig(BaseModel):
    Variables: dict[str, str] = {}


class FunctionConfig(BaseModel):
    """Lambda function definition as kept next to the function code."""

    FunctionName: str
    Description: Optional[str] = None
    Handler: Optional[str] = None
    Runtime: Optional[str] = None
    Role: Optional[str] = None
    MemorySize: Optional[int] = None
    Timeout: Optional[int] = None
    Architectures: list[str] = []
    Environment: Optional[EnvironmentConfig] = None
    Layers: list[str] = []
    Tags: dict[str, str] = {}
    PackageType: Optional[str] = None


def find_function_filename(base: Path | None = None) -> str:
    base = Path(base) if base is not None else Path(os.getcwd())
    for name in FUNCTION_FILENAMES:
        if (base / name).exists():
            return name
    return FUNCTION_FILENAMES[0]


def load_function(path, warn: Optional[Callable[[str], None]] = None) -> FunctionConfig:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FunctionConfigError(f"failed to read {path}: {e}") from e

    try:
        data = unmarshal_json(text, FunctionConfig.model_fields, str(path), warn=warn)
        fn = FunctionConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError, ValidationError) as e:
        raise FunctionConfigError(f"failed to load function from {path}: {e}") from e

    logger.debug(f"loaded function {fn.FunctionName} from {path}")
    return fn
