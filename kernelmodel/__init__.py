"""
Linear performance model for profiled hardware kernels.

Provides:
- A record store merging kernel config, power, latency and energy profiles
- Readers for the per-model JSON profile documents
- Least-squares fitting of power/energy/latency against (CIN, HW)
- Prediction and mean-squared-error evaluation
"""

from .errors import (
    KernelModelError,
    SourceUnavailableError,
    UnknownFieldError,
    UnmatchedKeyError,
    SingularSystemError,
    EmptyDatasetError,
)
from .records import (
    ConfigField,
    MeasuredField,
    KernelRecord,
    RecordStore,
    merge_config,
    merge_measurement,
    merge_config_entries,
    merge_measurement_entries,
)
from .sources import (
    model_namespace,
    discover_config_files,
    read_config_source,
    read_measurement_source,
    load_record_store,
)
from .regression import LinearModel, Prediction, design_matrices, fit, predict, evaluate

__version__ = '0.1.0'

__all__ = [
    'KernelModelError',
    'SourceUnavailableError',
    'UnknownFieldError',
    'UnmatchedKeyError',
    'SingularSystemError',
    'EmptyDatasetError',
    'ConfigField',
    'MeasuredField',
    'KernelRecord',
    'RecordStore',
    'merge_config',
    'merge_measurement',
    'merge_config_entries',
    'merge_measurement_entries',
    'model_namespace',
    'discover_config_files',
    'read_config_source',
    'read_measurement_source',
    'load_record_store',
    'LinearModel',
    'Prediction',
    'design_matrices',
    'fit',
    'predict',
    'evaluate',
]
