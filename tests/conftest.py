"""
Shared fixtures: synthetic INDIP recordings.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from pi_gaphi.signal_conditioner import LEFT_CHANNEL_ORDER, RIGHT_CHANNEL_ORDER

FULL_MODE = "IMU + Distance Sensors + Pressure Insole + Baro + Temp"

# Anatomical channels (1-based) loaded in each synthetic phase
HEEL = (12, 13, 14, 15, 16)
META1 = (2, 3, 4, 6, 7, 8)
TOE = (1,)


def header_lines(mode: str = FULL_MODE, frequency: str = "100Hz") -> list:
    """Lines 1-20 of an INDIP log."""
    return [
        "INDIP recording",
        "General Information",
        "UI version: 1.3",
        "",
        "Device ID: INDIP#000",
        "Hardware Version: 2.0",
        "Firmware Version: 1.5.2",
        "Settings",
        f"Mode: {mode}",
        f"Sampling Frequency: {frequency}",
        "Axl FS: 16g",
        "Gyro FS: 2000dps",
        "Magn FS: 50G",
        "DS1 FS: 200mm",
        "DS1 Offset: 0",
        "DS2 FS: 200mm",
        "DS2 Offset: 0",
        "",
        "Data",
        "\t".join(["Timestamp", "AccX", "AccY", "AccZ"]),
    ]


def make_raw_samples(n_samples: int) -> np.ndarray:
    """Raw (device unit) samples with an unloaded insole."""
    raw = np.zeros((n_samples, 30))
    raw[:, 0] = np.arange(n_samples) * 10
    raw[:, 3] = 1000.0                  # 1 g on Z
    raw[:, 7:10] = [120.0, -40.0, 300.0]
    raw[:, 10:12] = 150.0
    raw[:, 12:28] = 2.8                 # unloaded insole
    raw[:, 28] = 101325.0
    raw[:, 29] = 25.0
    return raw


GAIT_PHASES = [((), 10), (HEEL, 5), (HEEL + META1, 10), (META1 + TOE, 8)]
CYCLE_LENGTH = sum(length for _, length in GAIT_PHASES)


def gait_pressure(n_cycles: int = 4) -> np.ndarray:
    """
    Normalized anatomical pressure for repeated S-H-F-P cycles.

    Each cycle: swing (10) -> heel (5) -> heel + 1st metatarsal (10) ->
    1st metatarsal + toe (8). A final swing of 10 samples closes the walk.
    """
    blocks = []
    for _ in range(n_cycles):
        for channels, length in GAIT_PHASES:
            block = np.zeros((length, 16))
            block[:, np.asarray(channels, dtype=int) - 1] = 0.6
            blocks.append(block)
    blocks.append(np.zeros((10, 16)))
    return np.vstack(blocks)


def pressure_to_raw(pressure: np.ndarray, side: str = "R") -> np.ndarray:
    """Invert normalization and the side permutation: anatomical load -> raw volts."""
    order = RIGHT_CHANNEL_ORDER if side.upper() == "R" else LEFT_CHANNEL_ORDER
    volts = np.full(pressure.shape, 2.8)
    for anatomical, physical in enumerate(order):
        volts[:, physical - 1] = 2.8 - 2.8 * pressure[:, anatomical]
    return volts


def format_rows(samples: np.ndarray) -> list:
    return ["\t".join(f"{v:g}" for v in row) for row in samples]


@pytest.fixture
def write_recording(tmp_path):
    """Factory writing a synthetic INDIP log and returning its path."""

    def _write(
        samples: np.ndarray,
        mode: str = FULL_MODE,
        frequency: str = "100Hz",
        name: str = "INDIP#000_01-01-1970_000000.txt",
        extra_rows: list = None,
    ) -> Path:
        lines = header_lines(mode, frequency) + format_rows(samples)
        if extra_rows:
            lines += extra_rows
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path

    return _write


@pytest.fixture
def walking_samples():
    """Raw samples of a right-insole walk with four S-H-F-P cycles."""
    pressure = gait_pressure(n_cycles=4)
    raw = make_raw_samples(len(pressure))
    raw[:, 12:28] = pressure_to_raw(pressure, side="R")
    return raw
