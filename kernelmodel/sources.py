"""
Readers for the profiling JSON sources.

Every source document is a JSON object keyed by model name. The model
name is derived from the file name: ``addrelu_power.json`` is indexed by
``"addrelu"``. Inside the model object each key is a kernel identifier.

  config:      {"addrelu": {"<kernel>": {"config": {"CIN": 64, "HW": 56, ...}}}}
  power:       {"addrelu": {"<kernel>": {"power": "1.25"}}}
  latency:     {"addrelu": {"<kernel>": {"latency": "0.031"}}}
  energy:      {"addrelu": {"<kernel>": {"energy": "0.039"}}}

A file that cannot be opened or decoded raises SourceUnavailableError;
load_record_store() logs it and skips that source. Malformed entries
inside a readable document are logged and skipped.
"""

import json
import logging
from pathlib import Path
from typing import Union

from .errors import SourceUnavailableError
from .records import (
    MeasuredField,
    RecordStore,
    as_measurement,
    merge_config_entries,
    merge_measurement_entries,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def model_namespace(path: PathLike) -> str:
    """File stem up to the first underscore (the whole stem if there is none)."""
    return Path(path).stem.split('_', 1)[0]


def discover_config_files(directory: PathLike) -> list[Path]:
    """All regular files below ``directory``, recursively, in sorted order."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.error(f"Config directory not found or not a directory: {directory}")
        return []

    return sorted(p for p in directory.rglob('*') if p.is_file())


def read_config_source(path: PathLike) -> list[tuple[str, dict]]:
    """
    Read one config document.

    Returns ``(identifier, config)`` pairs where ``config`` is the raw
    ``config`` object of the kernel. Field names are validated later, when
    the entries are merged.
    """
    kernels = _load_namespace(path)

    entries = []
    for identifier, value in kernels.items():
        config = value.get('config') if isinstance(value, dict) else None
        if not isinstance(config, dict):
            logger.warning(f"{path}: kernel {identifier!r} has no config object, skipped")
            continue
        entries.append((identifier, config))

    logger.debug(f"Read {len(entries)} kernel configs from {path}")
    return entries


def read_measurement_source(
    path: PathLike,
    field: Union[str, MeasuredField],
) -> list[tuple[str, float]]:
    """
    Read one power, latency or energy document.

    Values are string-encoded floats in the source; plain JSON numbers
    are accepted as well; booleans are not.
    """
    field = MeasuredField(field)
    kernels = _load_namespace(path)

    entries = []
    for identifier, value in kernels.items():
        raw = value.get(field.value) if isinstance(value, dict) else None
        if raw is None:
            logger.warning(f"{path}: kernel {identifier!r} has no {field.value} value, skipped")
            continue
        try:
            entries.append((identifier, as_measurement(raw)))
        except (TypeError, ValueError):
            logger.warning(f"{path}: kernel {identifier!r} {field.value}={raw!r} is not a number, skipped")

    logger.debug(f"Read {len(entries)} {field.value} values from {path}")
    return entries


def load_record_store(
    config_dir: PathLike,
    latency_path: PathLike,
    power_path: PathLike,
    energy_path: PathLike,
) -> RecordStore:
    """
    Build a RecordStore from every config file under ``config_dir`` and
    the three measurement files.

    Merge order is config, latency, power, energy. A source that is
    unavailable is reported and contributes nothing.
    """
    store = RecordStore()

    config_files = discover_config_files(config_dir)
    for path in config_files:
        try:
            entries = read_config_source(path)
        except SourceUnavailableError as e:
            logger.warning(f"{e}, skipped")
            continue
        store = merge_config_entries(store, entries)

    logger.info(f"Loaded {len(store)} kernel configs from {len(config_files)} files")

    for field, path in (
        (MeasuredField.LATENCY, latency_path),
        (MeasuredField.POWER, power_path),
        (MeasuredField.ENERGY, energy_path),
    ):
        try:
            entries = read_measurement_source(path, field)
        except SourceUnavailableError as e:
            logger.warning(f"{e}, {field.value} source skipped")
            continue
        store = merge_measurement_entries(store, field, entries)

    return store


# ── Internal ─────────────────────────────────────────────────────────

def _load_namespace(path: PathLike) -> dict:
    """Parse ``path`` and return the object stored under its model namespace."""
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise SourceUnavailableError(path, f"could not be opened ({e.strerror or e})") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SourceUnavailableError(path, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise SourceUnavailableError(path, "top-level JSON value is not an object")

    model = model_namespace(path)
    kernels = data.get(model)
    if kernels is None:
        logger.warning(f"{path}: no entries for model {model!r}")
        return {}
    if not isinstance(kernels, dict):
        logger.warning(f"{path}: entries for model {model!r} are not an object, ignored")
        return {}

    return kernels
