"""
Configuration for the kernel performance model
Reads from environment variables with sensible defaults
"""
import os
from pathlib import Path

# Source locations (relative to the working directory)
KERNEL_CONFIG_DIR = Path(os.getenv('KERNEL_CONFIG_DIR', 'kernel_config/results/Addrelu'))
KERNEL_LATENCY_FILE = Path(os.getenv('KERNEL_LATENCY_FILE', 'kernel_latency/addrelu_latency.json'))
KERNEL_POWER_FILE = Path(os.getenv('KERNEL_POWER_FILE', 'kernel_power/addrelu_power.json'))
KERNEL_ENERGY_FILE = Path(os.getenv('KERNEL_ENERGY_FILE', 'kernel_energy/addrelu_energy.json'))

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
