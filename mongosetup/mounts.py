"""Mount point detection and unmounting."""

import subprocess
from pathlib import Path
from typing import Union


class UnmountError(RuntimeError):
    """Raised when neither a plain nor a forced unmount succeeded."""


def is_mountpoint(path: Union[str, Path]) -> bool:
    """Check whether a path is a mount point, via `mountpoint -q`."""
    result = subprocess.run(
        ["mountpoint", "-q", str(path)],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


def unmount(path: Union[str, Path]) -> bool:
    """
    Unmount a path, escalating to a forced unmount if the plain one fails.

    Returns:
        True if the forced unmount was needed

    Raises:
        UnmountError: If the forced unmount fails as well
    """
    print(f"Unmounting {path}")
    result = subprocess.run(["sudo", "umount", str(path)])
    if result.returncode == 0:
        return False

    print(f"Plain unmount of {path} failed, trying force unmount")
    result = subprocess.run(["sudo", "umount", "-f", str(path)])
    if result.returncode != 0:
        raise UnmountError(
            f"Cannot unmount {path}. Please unmount manually: sudo umount {path}"
        )
    return True
