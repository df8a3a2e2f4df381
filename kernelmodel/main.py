"""
Kernel Performance Model - Main Entry Point

Merges kernel config, latency, power and energy profiles, fits a linear
model of power/energy/latency against (CIN, HW) and reports its error.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from . import config
from .errors import EmptyDatasetError, SingularSystemError
from .records import MeasuredField
from .regression import evaluate, fit
from .report import print_measurement, print_model, print_records, write_tsv
from .sources import load_record_store

logger = logging.getLogger(__name__)

SHOW_CHOICES = ['records', 'power', 'energy', 'latency', 'none']
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def run(
    config_dir: Path = config.KERNEL_CONFIG_DIR,
    latency_path: Path = config.KERNEL_LATENCY_FILE,
    power_path: Path = config.KERNEL_POWER_FILE,
    energy_path: Path = config.KERNEL_ENERGY_FILE,
    show: str = 'records',
    tsv_path: Optional[Path] = None,
    console: Optional[Console] = None,
) -> int:
    """
    Run one fit-and-report pass.

    Returns 0 on success and 1 when the model cannot be fitted or
    evaluated; nothing about the model is printed in that case.
    """
    console = console or Console()

    records = load_record_store(config_dir, latency_path, power_path, energy_path)

    if show == 'records':
        print_records(console, records)
    elif show != 'none':
        print_measurement(console, records, MeasuredField(show))

    if tsv_path:
        tsv_path = Path(tsv_path)
        tsv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(tsv_path, 'w', newline='') as f:
            write_tsv(records, f)
        logger.info(f"Wrote {len(records)} records to {tsv_path}")

    try:
        model = fit(records)
        mse = evaluate(model.coefficients, records)
    except (SingularSystemError, EmptyDatasetError) as e:
        logger.error(f"Model fit failed: {e}")
        return 1

    print_model(console, model, mse)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Fit a linear power/energy/latency model for profiled kernels',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use the configured default source locations
  kernelmodel

  # Point at another operator's profiles
  kernelmodel --config-dir kernel_config/results/Conv \\
      --latency kernel_latency/conv_latency.json \\
      --power kernel_power/conv_power.json \\
      --energy kernel_energy/conv_energy.json

  # Only show measured power, and save the merged records
  kernelmodel --show power --tsv data/records.tsv
        """
    )

    parser.add_argument(
        '--config-dir', '-c',
        type=Path,
        default=config.KERNEL_CONFIG_DIR,
        help=f'Directory of kernel config JSON files (default: {config.KERNEL_CONFIG_DIR})'
    )

    parser.add_argument(
        '--latency', '-l',
        type=Path,
        default=config.KERNEL_LATENCY_FILE,
        help=f'Latency JSON file (default: {config.KERNEL_LATENCY_FILE})'
    )

    parser.add_argument(
        '--power', '-p',
        type=Path,
        default=config.KERNEL_POWER_FILE,
        help=f'Power JSON file (default: {config.KERNEL_POWER_FILE})'
    )

    parser.add_argument(
        '--energy', '-e',
        type=Path,
        default=config.KERNEL_ENERGY_FILE,
        help=f'Energy JSON file (default: {config.KERNEL_ENERGY_FILE})'
    )

    parser.add_argument(
        '--show',
        choices=SHOW_CHOICES,
        default='records',
        help='Which merged data to print before the model (default: records)'
    )

    parser.add_argument(
        '--tsv',
        type=Path,
        default=None,
        help='Also write the merged records to this tab-separated file'
    )

    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=LOG_LEVELS,
        default=config.LOG_LEVEL.upper(),
        help=f'Logging level (default: {config.LOG_LEVEL})'
    )

    args = parser.parse_args(argv)

    # LOG_LEVEL from the environment bypasses argparse choices
    if args.log_level not in LOG_LEVELS:
        print(f"Error: Unknown log level {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
        return 1

    console = Console()
    logging.basicConfig(
        level=args.log_level,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
    )

    return run(
        config_dir=args.config_dir,
        latency_path=args.latency,
        power_path=args.power,
        energy_path=args.energy,
        show=args.show,
        tsv_path=args.tsv,
        console=console,
    )


if __name__ == '__main__':
    sys.exit(main())
