"""
Unit tests for the record store and merge operations

Run with: python -m pytest tests/test_records.py
"""

import logging

import pytest

from kernelmodel.errors import UnknownFieldError, UnmatchedKeyError
from kernelmodel.records import (
    ROW_HEADER,
    ConfigField,
    KernelRecord,
    MeasuredField,
    RecordStore,
    as_measurement,
    merge_config,
    merge_config_entries,
    merge_measurement,
    merge_measurement_entries,
)


def _store(**configs) -> RecordStore:
    return merge_config_entries(RecordStore(), configs.items())


def test_config_field_parse():
    """Recognised keys map to enum members, anything else is rejected"""
    assert ConfigField.parse('KERNEL_SIZE') is ConfigField.KERNEL_SIZE
    assert ConfigField.KERNEL_SIZE.attr == 'kernel_size'
    assert ConfigField.HW.attr == 'hw'

    with pytest.raises(UnknownFieldError) as exc_info:
        ConfigField.parse('cin')  # keys are case-sensitive
    assert exc_info.value.name == 'cin'


def test_merge_config_creates_record():
    """merge_config inserts a record with defaults for unset fields"""
    store = merge_config(RecordStore(), 'k1', {'CIN': 4, 'HW': 8, 'COUT': 16})

    assert len(store) == 1
    record = store['k1']
    assert record == KernelRecord(identifier='k1', cin=4, hw=8, cout=16)
    assert record.power == 0.0
    assert record.strides == 0


def test_merge_returns_new_store():
    """Merges never mutate the store they are given"""
    empty = RecordStore()
    store = merge_config(empty, 'k1', {'CIN': 4})
    updated = merge_measurement(store, 'k1', 'power', 1.5)

    assert len(empty) == 0
    assert store['k1'].power == 0.0
    assert updated['k1'].power == 1.5


def test_merge_config_overwrites_existing():
    """A second config for the same kernel overwrites the named fields only"""
    store = _store(k1={'CIN': 4, 'HW': 8, 'STRIDES': 2})
    store = merge_measurement(store, 'k1', MeasuredField.LATENCY, 0.5)

    store = merge_config(store, 'k1', {ConfigField.CIN: 32})

    record = store['k1']
    assert record.cin == 32
    assert record.hw == 8
    assert record.strides == 2
    assert record.latency == 0.5
    assert len(store) == 1


def test_unknown_config_field_is_skipped(caplog):
    """An unrecognised key is reported without affecting other fields or kernels"""
    with caplog.at_level(logging.WARNING):
        store = _store(
            k1={'CIN': 4, 'DILATION': 2, 'HW': 8},
            k2={'CIN': 8, 'HW': 16},
        )

    assert store['k1'] == KernelRecord(identifier='k1', cin=4, hw=8)
    assert store['k2'] == KernelRecord(identifier='k2', cin=8, hw=16)
    assert 'DILATION' in caplog.text


def test_non_integer_config_value_is_skipped(caplog):
    """Config values must be integers; others are reported and skipped"""
    with caplog.at_level(logging.WARNING):
        store = _store(k1={'CIN': 'wide', 'HW': 8.0, 'COUT': 2.5, 'STRIDES': True})

    assert store['k1'] == KernelRecord(identifier='k1', hw=8)
    assert "'wide'" in caplog.text
    assert 'COUT' in caplog.text
    assert 'STRIDES' in caplog.text


def test_merge_measurement_sets_one_field():
    """Only the targeted measured field changes"""
    store = _store(k1={'CIN': 4, 'HW': 8})
    before = store['k1']

    store = merge_measurement(store, 'k1', 'energy', '0.25')

    after = store['k1']
    assert after.energy == 0.25
    assert after.power == before.power
    assert after.latency == before.latency
    assert after.cin == before.cin


def test_merge_measurement_unknown_key():
    """A measurement for a kernel without config raises and creates nothing"""
    store = _store(k1={'CIN': 4, 'HW': 8})

    with pytest.raises(UnmatchedKeyError) as exc_info:
        merge_measurement(store, 'K1', 'power', 1.0)

    assert exc_info.value.identifier == 'K1'
    assert list(store) == ['k1']


def test_unmatched_measurements_are_dropped(caplog):
    """Store size after merging equals the number of config kernels"""
    store = _store(k1={'CIN': 4, 'HW': 8}, k2={'CIN': 8, 'HW': 16})

    with caplog.at_level(logging.WARNING):
        store = merge_measurement_entries(
            store, MeasuredField.POWER,
            [('k1', 1.0), ('ghost', 9.0), ('k2', 2.0)],
        )

    assert len(store) == 2
    assert 'ghost' not in store
    assert store['k1'].power == 1.0
    assert store['k2'].power == 2.0
    assert 'ghost' in caplog.text


def test_measurement_merge_order_does_not_matter():
    """latency/power/energy touch disjoint fields, so order is irrelevant"""
    base = _store(k1={'CIN': 4, 'HW': 8}, k2={'CIN': 8, 'HW': 16})
    sources = [
        (MeasuredField.LATENCY, [('k1', 0.5), ('k2', 1.0)]),
        (MeasuredField.POWER, [('k1', 1.0), ('k2', 2.0)]),
        (MeasuredField.ENERGY, [('k1', 0.1), ('k2', 0.2)]),
    ]

    forward = base
    for field, entries in sources:
        forward = merge_measurement_entries(forward, field, entries)

    backward = base
    for field, entries in reversed(sources):
        backward = merge_measurement_entries(backward, field, entries)

    assert dict(forward) == dict(backward)


def test_unparsable_measurements_are_skipped(caplog):
    """A bad value drops only its own entry; the rest of the batch still merges"""
    store = _store(k1={'CIN': 4, 'HW': 8}, k2={'CIN': 8, 'HW': 16})

    with caplog.at_level(logging.WARNING):
        store = merge_measurement_entries(
            store, MeasuredField.POWER,
            [('k1', 'n/a'), ('k2', 2.0)],
        )

    assert store['k1'].power == 0.0
    assert store['k2'].power == 2.0
    assert "'n/a'" in caplog.text


def test_boolean_measurement_is_rejected(caplog):
    """true/false are not measurements, even though float(True) works"""
    with pytest.raises(TypeError):
        as_measurement(True)
    assert as_measurement('1.5') == 1.5
    assert as_measurement(2) == 2.0

    store = _store(k1={'CIN': 4, 'HW': 8})
    with caplog.at_level(logging.WARNING):
        store = merge_measurement_entries(store, 'latency', [('k1', True)])

    assert store['k1'].latency == 0.0
    assert 'latency=True' in caplog.text


def test_records_are_ordered_and_serializable():
    """records() sorts by identifier; to_row() follows ROW_HEADER"""
    store = _store(b={'CIN': 2, 'HW': 3}, a={'CIN': 1, 'HW': 5})

    assert [r.identifier for r in store.records()] == ['a', 'b']

    record = store['a']
    row = record.to_row()
    assert len(row) == len(ROW_HEADER)
    assert row[:3] == ['a', 5, 1]
    assert record.to_dict()['cin'] == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
