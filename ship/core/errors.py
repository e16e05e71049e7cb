"""Process exit codes.

Exit status is the only structured signal the resolver gives to whatever
supervises the container, so these values are part of the external contract
and must remain stable:

- 0: Success
- 1: Unsupported host architecture (nothing installed)
- 2: Environment error (bad config, missing or mismatched toolchain)
- 3: Build error (a matrix leg failed)
- 4: Staging error (missing, partial, corrupted or non-executable artifacts)
- 5: I/O error (installing the executable failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    UNSUPPORTED_ARCH = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    STAGING_ERROR = 4
    IO_ERROR = 5