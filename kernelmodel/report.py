"""
Console report for a fit-and-evaluate run.
"""

import csv
from typing import TextIO, Union

from rich.console import Console
from rich.table import Table

from .records import ROW_HEADER, MeasuredField, RecordStore
from .regression import INPUT_FIELDS, OUTPUT_FIELDS, LinearModel


def print_records(console: Console, records: RecordStore):
    """Print every merged record, one row per kernel."""
    table = Table(title=f"Kernel records ({len(records)})")
    measured = {f.attr for f in MeasuredField}
    for name in ROW_HEADER:
        if name == 'identifier':
            table.add_column("Kernel", style="cyan")
        elif name in measured:
            table.add_column(name, justify="right")
        else:
            table.add_column(name.upper(), justify="right")

    for record in records.records():
        table.add_row(*(_format(v) for v in record.to_row()))

    console.print(table)


def print_measurement(console: Console, records: RecordStore, field: Union[str, MeasuredField]):
    """Print HW, CIN and a single measured value for every kernel."""
    field = MeasuredField(field)

    table = Table(title=f"Kernel {field.value}")
    table.add_column("Kernel", style="cyan")
    table.add_column("HW", justify="right")
    table.add_column("CIN", justify="right")
    table.add_column(field.value, justify="right")

    for record in records.records():
        table.add_row(
            record.identifier,
            str(record.hw),
            str(record.cin),
            _format(getattr(record, field.attr)),
        )

    console.print(table)


def print_model(console: Console, model: LinearModel, mse: float):
    """Print the coefficient matrix, the training MSE and the sample count."""
    table = Table(title="Coefficients of model")
    table.add_column("Term", style="cyan")
    for field in OUTPUT_FIELDS:
        table.add_column(field.value, justify="right")

    terms = ["intercept"] + [f.value for f in INPUT_FIELDS]
    for term, row in zip(terms, model.coefficients):
        table.add_row(term, *(f"{v:.6g}" for v in row))

    console.print(table)
    console.print(f"Current MSE: [bold]{mse:.6g}[/bold]")
    console.print(f"Sample size: [bold]{model.sample_count}[/bold]")


def write_tsv(records: RecordStore, stream: TextIO):
    """Write every record as a tab-separated row, header first."""
    writer = csv.writer(stream, delimiter='\t', lineterminator='\n')
    writer.writerow(ROW_HEADER)
    for record in records.records():
        writer.writerow(record.to_row())


def _format(value) -> str:
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)
