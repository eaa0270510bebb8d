"""Preconditions checked before anything on the host is touched."""

import os
import shutil


class PreflightError(RuntimeError):
    """Raised when the installer is invoked in a way it cannot work with."""


def check_preflight() -> None:
    """
    Refuse to run as root and require sudo.

    Raises:
        PreflightError: If a precondition is not met
    """
    if os.geteuid() == 0:
        raise PreflightError(
            "This script should not be run as root. Run as regular user with sudo access."
        )
    if shutil.which("sudo") is None:
        raise PreflightError("sudo is required but not installed.")
