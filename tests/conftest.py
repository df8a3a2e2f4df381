import json
from pathlib import Path

import pytest

# (CIN, HW) -> outputs are exact affine functions of these inputs
SPEC_KERNELS = {
    'k1': {'CIN': 4, 'HW': 8, 'power': '1.0', 'latency': '0.5', 'energy': '0.1'},
    'k2': {'CIN': 8, 'HW': 16, 'power': '2.0', 'latency': '1.0', 'energy': '0.2'},
}

SOLVABLE_KERNELS = {
    **SPEC_KERNELS,
    'k3': {'CIN': 12, 'HW': 20, 'power': '3.0', 'latency': '1.5', 'energy': '0.3'},
}


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def write_profiles(root: Path, kernels: dict, model: str = 'addrelu') -> dict:
    """
    Write a config directory plus latency/power/energy files for ``kernels``.

    Each kernel maps to a dict of config fields (upper case) and string
    measurements (power/latency/energy). Returns the paths keyed by
    'config_dir', 'latency', 'power', 'energy'.
    """
    measured = ('power', 'latency', 'energy')

    config = {
        key: {'config': {k: v for k, v in fields.items() if k not in measured}}
        for key, fields in kernels.items()
    }
    config_dir = root / 'kernel_config' / 'results' / 'Addrelu'
    write_json(config_dir / f'{model}_config.json', {model: config})

    paths = {'config_dir': config_dir}
    for name in measured:
        values = {
            key: {name: fields[name]}
            for key, fields in kernels.items() if name in fields
        }
        paths[name] = write_json(root / f'kernel_{name}' / f'{model}_{name}.json', {model: values})

    return paths


@pytest.fixture
def profiles(tmp_path):
    """Factory writing profile documents below tmp_path."""
    def _profiles(kernels: dict, model: str = 'addrelu') -> dict:
        return write_profiles(tmp_path, kernels, model)
    return _profiles
