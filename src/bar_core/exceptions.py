"""Domain-specific exceptions for bar_core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from BarCoreError for easy catching.

The report pipeline itself never raises for ledger content: malformed
records degrade precision instead. These exceptions cover programmer-facing
errors such as invalid configuration.
"""


class BarCoreError(Exception):
    """Base exception for all bar_core errors.

    Users can catch this exception to handle any bar_core error.
    """

    pass


class ConfigError(BarCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Environment overrides cannot be parsed
    """

    pass


class DataQualityError(BarCoreError):
    """Raised when a fact frame does not have the expected structure.

    This exception is raised when:
    - Required columns are missing from a frame passed to a frame-level helper
    """

    pass
