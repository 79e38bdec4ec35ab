"""Locating and decoding settings files."""

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError

from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "VAGGA_USER_HOME"

RecordT = TypeVar("RecordT", bound=BaseModel)


def user_home_from_env(environ: Mapping[str, str], var: str = HOME_ENV_VAR) -> Path | None:
    """Get the acting user's home from the environment.

    Args:
        environ: Environment mapping
        var: Variable naming the home directory

    Returns:
        Home path, or None if the variable is unset or empty
    """
    value = environ.get(var)
    if not value:
        return None
    return Path(value)


def existing_sources(candidates: Sequence[Path]) -> list[Path]:
    """Filter candidate settings files down to those that exist.

    Order is preserved. Missing files, and files that can't be stat'ed,
    are not an error.
    """
    found = []
    for path in candidates:
        try:
            exists = path.exists()
        except OSError as e:
            # Unreachable files count as missing, same as ENOENT
            logger.debug(f"Can't stat settings file {path}: {e}")
            exists = False
        if exists:
            found.append(path)
        else:
            logger.debug(f"Settings file {path} not found, skipping")
    return found


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def decode_record(path: Path, record_type: type[RecordT]) -> RecordT:
    """Read a YAML settings file into a typed record.

    Args:
        path: Settings file to read
        record_type: Record model for the file's tier

    Returns:
        Validated record (all fields default when the file is empty)

    Raises:
        ConfigFileError: If the file can't be read or isn't valid YAML
        ConfigValidationError: If the data doesn't match the record schema
    """
    logger.debug(f"Reading {record_type.__name__} from {path}")
    try:
        with open(path, "rb") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(path, f"can't read file: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(path, f"expected a mapping at top level, got {type(data).__name__}")

    try:
        return record_type.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(path, _format_validation_error(e)) from e
