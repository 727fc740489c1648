"""
Error Types
Exceptions and warnings raised while reading and conditioning INDIP recordings.
"""

from typing import Optional


class FormatError(ValueError):
    """Raised when a recording file does not follow the INDIP text layout.

    Fatal for the recording: no partial result is produced.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ConfigurationWarning(UserWarning):
    """Issued when a processing option is not recognised and a fallback is used."""
