"""Exception and warning types for the membrane spectra pipeline."""

from __future__ import annotations


class BilayerSpectraError(Exception):
    """Base class for domain-specific errors."""


class ConfigurationError(BilayerSpectraError, ValueError):
    """Raised when a required run parameter (grid, lipids, frames) is missing."""

    def __init__(self, parameter: str, message: str | None = None) -> None:
        if message is None:
            message = (
                f"{parameter} must be specified. "
                "Try `bilayer-spectra --help` for more info."
            )
        super().__init__(message)
        self.parameter = parameter


class TrajectoryParseError(BilayerSpectraError, ValueError):
    """Raised when a box-size or coordinate stream is short or malformed."""

    def __init__(self, path, expected: int, found: int | None = None,
                 message: str | None = None) -> None:
        if message is None:
            message = (
                f"{path}: expected {expected} records but found {found}."
            )
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.found = found


class InvariantViolationError(BilayerSpectraError, RuntimeError):
    """Raised when an internal consistency check of the lattice fails."""


class DataQualityWarning(UserWarning):
    """Non-fatal data-quality condition (empty patches, stray indices, ...)."""


__all__ = [
    "BilayerSpectraError",
    "ConfigurationError",
    "TrajectoryParseError",
    "InvariantViolationError",
    "DataQualityWarning",
]
