"""Error codes attached to per-file diagnostics.

Error Code Convention:
    CY1xx - Input errors (reading, file type)
    CY2xx - Segmentation errors
"""

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes reported alongside the treemap."""

    # Input errors (CY1xx)
    CY100 = "CY100"  # File could not be read
    CY101 = "CY101"  # No counting policy for the file extension

    # Segmentation errors (CY2xx)
    CY200 = "CY200"  # Function body braces never balance
