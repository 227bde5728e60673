"""Exit codes shared by CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 10
INSUFFICIENT_DATA_EXIT_CODE = 20

__all__ = ["INSUFFICIENT_DATA_EXIT_CODE", "SYSTEM_EXIT_CODE", "VALIDATION_EXIT_CODE"]
