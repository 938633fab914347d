"""Read simulation config files from disk.

Files hold one mapping with a required ``gambles`` section and optional
``model`` and ``simulation`` sections. JSON and YAML spellings are accepted;
both are parsed into plain dictionaries and validated later by
:func:`~ibl_choice.core.config.simulation_config_from_mapping`.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import yaml

from .errors import InvalidConfigurationError

_PARSERS: dict[str, Callable[[IO[str]], Any]] = {
    ".json": json.load,
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}

SUPPORTED_CONFIG_SUFFIXES: tuple[str, ...] = tuple(_PARSERS)


def load_config_mapping(path: str | Path) -> dict[str, Any]:
    """Parse a config file into its top-level mapping.

    Parameters
    ----------
    path : str | pathlib.Path
        File ending in one of :data:`SUPPORTED_CONFIG_SUFFIXES`.

    Returns
    -------
    dict[str, Any]
        Unvalidated top-level mapping.

    Raises
    ------
    InvalidConfigurationError
        If the suffix is not supported or the document is not a mapping.
    """

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    parser = _PARSERS.get(suffix)
    if parser is None:
        supported = ", ".join(SUPPORTED_CONFIG_SUFFIXES)
        raise InvalidConfigurationError(
            f"unsupported config file extension {suffix!r}; expected one of {supported}"
        )

    with config_path.open("r", encoding="utf-8") as handle:
        raw = parser(handle)
    if not isinstance(raw, dict):
        raise InvalidConfigurationError("config root must be a JSON/YAML object")
    return raw


__all__ = ["SUPPORTED_CONFIG_SUFFIXES", "load_config_mapping"]
