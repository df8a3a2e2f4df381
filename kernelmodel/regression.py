"""
Multi-output linear regression over a RecordStore.

Fits power, energy and latency as affine functions of (CIN, HW):

    [power, energy, latency] = [1, CIN, HW] · C

where C is a 3 × 3 coefficient matrix whose row 0 holds the intercepts.
C solves the normal equations (XᵗX) C = XᵗY through a Cholesky
factorisation of XᵗX. When the records do not pin down a unique
solution (fewer than three independent points, or CIN and HW collinear)
fit() raises SingularSystemError instead of returning coefficients.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from scipy.linalg import LinAlgError, cho_factor, cho_solve

from .errors import EmptyDatasetError, SingularSystemError
from .records import ConfigField, KernelRecord, MeasuredField, RecordStore

logger = logging.getLogger(__name__)

INPUT_FIELDS = (ConfigField.CIN, ConfigField.HW)
OUTPUT_FIELDS = (MeasuredField.POWER, MeasuredField.ENERGY, MeasuredField.LATENCY)

COEFFICIENT_SHAPE = (len(INPUT_FIELDS) + 1, len(OUTPUT_FIELDS))


class Prediction(NamedTuple):
    """Predicted outputs for one (CIN, HW) input."""
    power: float
    energy: float
    latency: float


@dataclass(frozen=True, eq=False)
class LinearModel:
    """Fitted coefficients and the number of records they were fitted on."""

    coefficients: np.ndarray    # (inputs + 1) × outputs, row 0 = intercept
    sample_count: int

    def predict(self, cin: float, hw: float) -> Prediction:
        return predict(self.coefficients, cin, hw)

    def evaluate(self, records: RecordStore) -> float:
        return evaluate(self.coefficients, records)


def design_matrices(records: RecordStore) -> tuple[np.ndarray, np.ndarray]:
    """
    Build the design matrix X and response matrix Y.

    X has one row ``[1, CIN, HW]`` per record and Y one row
    ``[power, energy, latency]``. Rows follow identifier order.
    """
    rows = records.records()
    x = np.empty((len(rows), COEFFICIENT_SHAPE[0]), dtype=float)
    y = np.empty((len(rows), COEFFICIENT_SHAPE[1]), dtype=float)

    for i, record in enumerate(rows):
        x[i] = _input_row(*(getattr(record, f.attr) for f in INPUT_FIELDS))
        y[i] = _measured_row(record)

    return x, y


def fit(records: RecordStore) -> LinearModel:
    """
    Fit the linear model by ordinary least squares.

    Raises:
        EmptyDatasetError: the store has no records.
        SingularSystemError: XᵗX is singular, so no unique fit exists.
    """
    if len(records) == 0:
        raise EmptyDatasetError("Cannot fit a model to an empty record store")

    x, y = design_matrices(records)
    n_params = x.shape[1]

    # XᵗX can come out numerically positive definite even when X is rank
    # deficient, so check the rank of X itself before factorising.
    rank = np.linalg.matrix_rank(x)
    if rank < n_params:
        raise SingularSystemError(
            f"Design matrix has rank {rank} but {n_params} parameters "
            f"({len(records)} records); need at least {n_params} records "
            f"with linearly independent (1, CIN, HW) rows"
        )

    gram = x.T @ x
    moments = x.T @ y

    try:
        factor = cho_factor(gram, lower=True)
    except LinAlgError as e:
        raise SingularSystemError(f"Normal equations are not positive definite: {e}") from e

    # Triangular solves against the factor: L z = XᵗY, Lᵗ C = z
    coefficients = cho_solve(factor, moments)

    if not np.all(np.isfinite(coefficients)):
        raise SingularSystemError("Least-squares solution is not finite")

    logger.info(f"Fitted linear model on {len(records)} records")
    return LinearModel(coefficients=coefficients, sample_count=len(records))


def predict(coefficients: np.ndarray, cin: float, hw: float) -> Prediction:
    """Predict (power, energy, latency) for one input. No range checking."""
    coefficients = _checked_coefficients(coefficients)
    power, energy, latency = _input_row(cin, hw) @ coefficients
    return Prediction(float(power), float(energy), float(latency))


def evaluate(coefficients: np.ndarray, records: RecordStore) -> float:
    """
    Mean squared error of the model over every record and every output.

    The result is a single scalar averaged over ``len(records) × 3``
    cells.

    Raises:
        EmptyDatasetError: the store has no records.
    """
    if len(records) == 0:
        raise EmptyDatasetError("Cannot evaluate a model on an empty record store")

    coefficients = _checked_coefficients(coefficients)

    squared_error = 0.0
    for record in records.records():
        predicted = predict(coefficients, record.cin, record.hw)
        errors = _measured_row(record) - np.asarray(predicted)
        squared_error += float(np.dot(errors, errors))

    return squared_error / (len(records) * len(OUTPUT_FIELDS))


# ── Internal ─────────────────────────────────────────────────────────

def _input_row(cin: float, hw: float) -> np.ndarray:
    return np.array([1.0, cin, hw], dtype=float)


def _measured_row(record: KernelRecord) -> np.ndarray:
    return np.array([getattr(record, f.attr) for f in OUTPUT_FIELDS], dtype=float)


def _checked_coefficients(coefficients) -> np.ndarray:
    coefficients = np.asarray(coefficients, dtype=float)
    if coefficients.shape != COEFFICIENT_SHAPE:
        raise ValueError(
            f"Coefficient matrix must have shape {COEFFICIENT_SHAPE}, "
            f"got {coefficients.shape}"
        )
    return coefficients
