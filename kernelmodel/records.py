"""
Per-kernel record store.

A RecordStore maps a kernel identifier to its KernelRecord. Records are
created only by the config source; the power, latency and energy sources
fill in measured fields of records that already exist.

Every merge returns a new store and leaves its input untouched, so each
pipeline stage hands the next one an explicit value:

    store = merge_config_entries(RecordStore(), read_config_source(path))
    store = merge_measurement_entries(store, MeasuredField.POWER, entries)
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Optional, Union

from .errors import UnknownFieldError, UnmatchedKeyError

logger = logging.getLogger(__name__)


class ConfigField(Enum):
    """Recognised keys of a kernel's ``config`` object."""

    CIN = 'CIN'
    CIN1 = 'CIN1'
    CIN2 = 'CIN2'
    CIN3 = 'CIN3'
    CIN4 = 'CIN4'
    COUT = 'COUT'
    KERNEL_SIZE = 'KERNEL_SIZE'
    STRIDES = 'STRIDES'
    POOL_STRIDES = 'POOL_STRIDES'
    HW = 'HW'

    @classmethod
    def parse(cls, name: str) -> 'ConfigField':
        """Look up a config key, raising UnknownFieldError for anything else."""
        try:
            return cls(name)
        except ValueError:
            raise UnknownFieldError(name) from None

    @property
    def attr(self) -> str:
        """Attribute name on KernelRecord."""
        return self.name.lower()


class MeasuredField(Enum):
    """Measured quantities, keyed by their name in the measurement JSON."""

    POWER = 'power'
    ENERGY = 'energy'
    LATENCY = 'latency'

    @property
    def attr(self) -> str:
        return self.value


@dataclass(frozen=True)
class KernelRecord:
    """Config attributes and measurements of one kernel."""

    identifier: str

    # Config (0 = unset)
    cin: int = 0
    hw: int = 0
    cin1: int = 0
    cin2: int = 0
    cin3: int = 0
    cin4: int = 0
    cout: int = 0
    kernel_size: int = 0
    strides: int = 0
    pool_strides: int = 0

    # Measurements (0.0 = not yet observed)
    power: float = 0.0
    energy: float = 0.0
    latency: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return asdict(self)

    def to_row(self) -> list:
        """Values in report column order (see ROW_HEADER)"""
        return [getattr(self, name) for name in ROW_HEADER]


# Report column order: identifier, HW, CIN, the remaining config, measurements
ROW_HEADER = [
    'identifier',
    'hw',
    'cin',
    'cin1',
    'cin2',
    'cin3',
    'cin4',
    'cout',
    'kernel_size',
    'strides',
    'pool_strides',
    'power',
    'latency',
    'energy',
]


class RecordStore(Mapping):
    """
    Immutable mapping from kernel identifier to KernelRecord.

    Identifiers are opaque, case-sensitive strings. Use the merge
    functions in this module to derive a new store.
    """

    def __init__(self, records: Optional[Mapping[str, KernelRecord]] = None):
        self._records: dict[str, KernelRecord] = dict(records or {})

    def __getitem__(self, identifier: str) -> KernelRecord:
        return self._records[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"RecordStore({len(self._records)} records)"

    def records(self) -> list[KernelRecord]:
        """Records ordered by identifier."""
        return [self._records[key] for key in sorted(self._records)]


# ── Merge operations ────────────────────────────────────────────────

def merge_config(
    records: RecordStore,
    identifier: str,
    fields: Mapping[Union[str, ConfigField], int],
) -> RecordStore:
    """
    Insert or update the config attributes of one kernel.

    This is the only operation that creates records. For an existing
    record, fields named in ``fields`` are overwritten and every other
    field (including measurements) keeps its value. Unrecognised field
    names and non-integer values are logged and skipped.
    """
    updated = dict(records)
    _apply_config(updated, identifier, fields)
    return RecordStore(updated)


def merge_measurement(
    records: RecordStore,
    identifier: str,
    field_name: Union[str, MeasuredField],
    value: float,
) -> RecordStore:
    """
    Set one measured field of an existing kernel.

    Raises UnmatchedKeyError, without producing a new store, when the
    identifier was never created by the config source.
    """
    field = MeasuredField(field_name)
    updated = dict(records)
    _apply_measurement(updated, identifier, field, value)
    return RecordStore(updated)


def merge_config_entries(
    records: RecordStore,
    entries: Iterable[tuple[str, Mapping]],
) -> RecordStore:
    """Apply merge_config for every ``(identifier, fields)`` pair."""
    updated = dict(records)
    count = 0
    for identifier, config in entries:
        _apply_config(updated, identifier, config)
        count += 1
    logger.debug(f"Merged config for {count} kernels ({len(updated)} records)")
    return RecordStore(updated)


def merge_measurement_entries(
    records: RecordStore,
    field_name: Union[str, MeasuredField],
    entries: Iterable[tuple[str, float]],
) -> RecordStore:
    """
    Apply merge_measurement for every ``(identifier, value)`` pair.

    Entries without a matching record or with a value that is not a
    number are logged and dropped.
    """
    field = MeasuredField(field_name)
    updated = dict(records)
    merged = 0
    skipped = 0
    for identifier, value in entries:
        try:
            _apply_measurement(updated, identifier, field, value)
            merged += 1
        except UnmatchedKeyError as e:
            logger.warning(f"{e}, {field.value} measurement skipped")
            skipped += 1
        except (TypeError, ValueError):
            logger.warning(f"{identifier}: {field.value}={value!r} is not a number, skipped")
            skipped += 1

    logger.debug(f"Merged {merged} {field.value} measurements ({skipped} skipped)")
    return RecordStore(updated)


def as_measurement(value) -> float:
    """Parse a measured value. Numbers and numeric strings are accepted, booleans are not."""
    if isinstance(value, bool):
        raise TypeError(f"boolean is not a measurement: {value!r}")
    return float(value)


# ── Internal ─────────────────────────────────────────────────────────

def _apply_config(store: dict, identifier: str, config: Mapping) -> None:
    updates: dict[str, int] = {}

    for name, value in config.items():
        try:
            field = name if isinstance(name, ConfigField) else ConfigField.parse(name)
        except UnknownFieldError as e:
            logger.warning(f"{identifier}: {e}, skipped")
            continue

        try:
            updates[field.attr] = _as_int(value)
        except (TypeError, ValueError):
            logger.warning(f"{identifier}: {field.value}={value!r} is not an integer, skipped")

    existing = store.get(identifier)
    if existing is None:
        store[identifier] = KernelRecord(identifier=identifier, **updates)
    else:
        store[identifier] = replace(existing, **updates)


def _apply_measurement(store: dict, identifier: str, field: MeasuredField, value: float) -> None:
    existing = store.get(identifier)
    if existing is None:
        raise UnmatchedKeyError(identifier)
    store[identifier] = replace(existing, **{field.attr: as_measurement(value)})


def _as_int(value) -> int:
    if isinstance(value, bool):
        raise TypeError(f"boolean is not a config value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"not an integer: {value!r}")
