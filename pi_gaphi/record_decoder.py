"""
Record Decoder Module
Parses INDIP text logs into recording metadata and a raw sample matrix.

Expected file layout:
- Line 1: title
- Lines 2-17: metadata block, ``Key: Value`` rows; rows 1, 3 and 7 of the
  block are separators
- Line 21 onwards: tab-delimited rows of 30 numeric fields

Example:
    UI version: 1.3
    ...
    0	12	-3	998	0.5	...
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, TextIO, Union

import numpy as np

from .config import DecoderConfig
from .errors import FormatError

logger = logging.getLogger(__name__)

METADATA_FIELDS = (
    "ui_version",
    "device_id",
    "hardware_version",
    "firmware_version",
    "mode",
    "sampling_frequency",
    "axl_fs",
    "gyro_fs",
    "magn_fs",
    "ds1_fs",
    "ds1_offset",
    "ds2_fs",
    "ds2_offset",
)

DATA_COLUMNS = (
    ["Timestamp", "AccX", "AccY", "AccZ", "GyroX", "GyroY", "GyroZ",
     "MagnX", "MagnY", "MagnZ", "Distance1", "Distance2"]
    + [f"P{i}" for i in range(16)]
    + ["Baro", "Temp"]
)

# Sensing capabilities that can appear in the Mode header field
IMU = "IMU"
DISTANCE_SENSORS = "Distance Sensors"
PRESSURE_INSOLE = "Pressure Insole"
BARO_TEMP = "Baro + Temp"
KNOWN_CAPABILITIES = (IMU, DISTANCE_SENSORS, PRESSURE_INSOLE, BARO_TEMP)

_NUMBER = re.compile(r"[-+]?\d*\.?\d+")


@dataclass(frozen=True)
class RecordingMetadata:
    """Header information of one INDIP recording (raw header strings)."""
    ui_version: str
    device_id: str
    hardware_version: str
    firmware_version: str
    mode: str
    sampling_frequency: str
    axl_fs: str
    gyro_fs: str
    magn_fs: str
    ds1_fs: str
    ds1_offset: str
    ds2_fs: str
    ds2_offset: str

    def has_capability(self, name: str) -> bool:
        """Check whether a sensing capability is enabled in the Mode field."""
        return name in self.mode

    @property
    def capabilities(self) -> FrozenSet[str]:
        """Known sensing capabilities enabled for this recording."""
        return frozenset(c for c in KNOWN_CAPABILITIES if self.has_capability(c))

    @property
    def sampling_frequency_hz(self) -> Optional[float]:
        """Sampling frequency in Hz, e.g. ``"200Hz"`` -> 200.0."""
        match = _NUMBER.search(self.sampling_frequency)
        return float(match.group()) if match else None


@dataclass
class RawRecording:
    """Container for a decoded, not yet conditioned, recording."""
    metadata: RecordingMetadata
    samples: np.ndarray  # Shape: (n_samples, 30)
    source: str = ""

    @property
    def n_samples(self) -> int:
        return len(self.samples)


def parse_header(
    lines: List[str],
    config: Optional[DecoderConfig] = None,
) -> RecordingMetadata:
    """
    Build RecordingMetadata from the raw metadata block.

    Args:
        lines: The metadata block lines (file lines 2-17 by default)
        config: Decoder layout

    Returns:
        RecordingMetadata with the 13 header fields
    """
    if config is None:
        config = DecoderConfig()

    if len(lines) < config.header_line_count:
        raise FormatError(
            f"Header has {len(lines)} lines, expected {config.header_line_count}"
        )

    values = []
    for row, line in enumerate(lines[:config.header_line_count], start=1):
        if row in config.separator_rows:
            continue
        line = line.rstrip("\r\n")
        key, sep, value = line.partition(": ")
        if not sep and line.rstrip().endswith(":"):
            # empty value with its trailing space stripped
            key, sep, value = line.rstrip()[:-1], ":", ""
        if not sep:
            raise FormatError(
                f"Metadata row is not a 'Key: Value' pair: {line.strip()!r}",
                line_number=config.header_first_line + row - 1,
            )
        values.append(value.strip())

    if len(values) != len(METADATA_FIELDS):
        raise FormatError(
            f"Header yields {len(values)} fields, expected {len(METADATA_FIELDS)}"
        )

    return RecordingMetadata(**dict(zip(METADATA_FIELDS, values)))


def parse_data_lines(
    lines: Iterable[str],
    first_line_number: int = 1,
    n_columns: int = 30,
) -> np.ndarray:
    """
    Parse tab-delimited sample rows.

    Blank lines are skipped and a single trailing tab is tolerated.

    Args:
        lines: Sample rows
        first_line_number: 1-based file line of the first row (for error messages)
        n_columns: Expected number of fields per row

    Returns:
        Array of shape (n_rows, n_columns)
    """
    rows = []
    for line_number, line in enumerate(lines, start=first_line_number):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue

        tokens = line.split("\t")
        if len(tokens) == n_columns + 1 and not tokens[-1].strip():
            tokens = tokens[:-1]
        if len(tokens) != n_columns:
            raise FormatError(
                f"Expected {n_columns} fields, found {len(tokens)}",
                line_number=line_number,
            )

        try:
            rows.append([float(token) for token in tokens])
        except ValueError as e:
            raise FormatError(f"Non-numeric field ({e})", line_number=line_number) from e

    return np.array(rows, dtype=np.float64).reshape(-1, n_columns)


def _read_lines(source: Union[str, Path, TextIO]) -> List[str]:
    if hasattr(source, "read"):
        return source.read().splitlines()

    filepath = Path(source)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        return f.read().splitlines()


def read_recording(
    source: Union[str, Path, TextIO],
    start_line: Optional[int] = None,
    config: Optional[DecoderConfig] = None,
) -> RawRecording:
    """
    Read an INDIP text log.

    Args:
        source: Path to the ``.txt`` log, or an open text handle
        start_line: 1-based row of the sample block to start reading from
                    (1 = first sample row, line 21 of the file by default)
        config: Decoder layout

    Returns:
        RawRecording with metadata and the raw (n_samples, 30) matrix
    """
    if config is None:
        config = DecoderConfig()

    lines = _read_lines(source)
    if isinstance(source, (str, Path)):
        name = str(source)
    else:
        name = getattr(source, "name", "<stream>")

    header_start = config.header_first_line - 1
    metadata = parse_header(
        lines[header_start:header_start + config.header_line_count], config
    )

    first_line = config.data_start_line
    if start_line is not None:
        if start_line < 1:
            raise ValueError(f"start_line must be >= 1, got {start_line}")
        first_line += start_line - 1

    samples = parse_data_lines(
        lines[first_line - 1:], first_line_number=first_line, n_columns=config.n_columns
    )

    logger.info(
        f"Loaded {len(samples)} samples from {name} "
        f"(device {metadata.device_id}, {metadata.sampling_frequency})"
    )

    return RawRecording(metadata=metadata, samples=samples, source=name)
