"""File management helpers: sudo-aware writes, backups, removal and templating."""

import grp
import os
import pwd
import subprocess
import time
from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .paths import TEMPLATES_DIR


def read_file(path: Union[str, Path]) -> str:
    """Read file content, using sudo if necessary."""
    path = Path(path)
    if not path.exists():
        return ""
    if os.access(path, os.R_OK):
        return path.read_text()
    # Need sudo to read
    result = subprocess.run(
        ["sudo", "cat", str(path)],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def ensure_dir(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Idempotently ensure a directory exists with correct permissions.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if not path.exists():
        print(f"Creating directory: {path}")
        subprocess.run(["sudo", "mkdir", "-p", str(path)], check=True)
        changed = True

    if owner or group or mode:
        if set_permissions(path, owner=owner, group=group, mode=mode):
            changed = True

    return changed


def set_permissions_recursive(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Recursively set ownership and permissions on a directory tree.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    if not path.exists():
        return False

    changed = False

    if owner or group:
        chown_arg = f"{owner or ''}:{group or ''}"
        print(f"Setting ownership {chown_arg} recursively on {path}")
        subprocess.run(["sudo", "chown", "-R", chown_arg, str(path)], check=True)
        changed = True

    if mode is not None:
        print(f"Setting mode {oct(mode)} recursively on {path}")
        subprocess.run(["sudo", "chmod", "-R", oct(mode)[2:], str(path)], check=True)
        changed = True

    return changed


def set_permissions(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Set ownership and permissions on a file or directory.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if owner or group:
        stat = path.stat()
        current_owner = pwd.getpwuid(stat.st_uid).pw_name
        current_group = grp.getgrgid(stat.st_gid).gr_name

        target_owner = owner or current_owner
        target_group = group or current_group

        if current_owner != target_owner or current_group != target_group:
            print(f"Setting ownership {target_owner}:{target_group} on {path}")
            chown_arg = f"{target_owner}:{target_group}"
            subprocess.run(["sudo", "chown", chown_arg, str(path)], check=True)
            changed = True

    if mode is not None:
        current_mode = path.stat().st_mode & 0o777
        if current_mode != mode:
            print(f"Setting mode {oct(mode)} on {path}")
            subprocess.run(["sudo", "chmod", oct(mode)[2:], str(path)], check=True)
            changed = True

    return changed


def write_file(path: Union[str, Path], content: str, mode: Optional[int] = None) -> None:
    """
    Overwrite a root-owned file with new content.

    No merge with what was there before; back it up first if it matters.
    """
    path = Path(path)
    print(f"Writing file: {path}")
    subprocess.run(
        ["sudo", "tee", str(path)],
        input=content.encode(),
        stdout=subprocess.DEVNULL,
        check=True,
    )
    if mode is not None:
        subprocess.run(["sudo", "chmod", oct(mode)[2:], str(path)], check=True)


def backup_file(
    path: Union[str, Path],
    label: str = "backup",
    move: bool = False,
) -> Optional[Path]:
    """
    Copy (or move) a file to `<path>.<label>.<epoch seconds>`.

    Returns:
        The backup path, or None if there was nothing to back up
    """
    path = Path(path)
    if not path.exists():
        return None

    backup_path = path.parent / f"{path.name}.{label}.{int(time.time())}"
    print(f"Backing up {path} to {backup_path}")
    verb = "mv" if move else "cp"
    subprocess.run(["sudo", verb, str(path), str(backup_path)], check=True)
    return backup_path


def remove_file(path: Union[str, Path]) -> bool:
    """
    Remove a file or symlink with sudo (best-effort).

    Returns:
        True if something was there to remove
    """
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        return False

    print(f"  Removing: {path}")
    subprocess.run(["sudo", "rm", "-f", str(path)], capture_output=True)
    return True


def remove_glob(directory: Union[str, Path], pattern: str) -> list[Path]:
    """
    Remove every file in a directory matching a glob pattern.

    Returns:
        The paths that were removed
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    removed = []
    for path in sorted(directory.glob(pattern)):
        if remove_file(path):
            removed.append(path)
    return removed


def remove_tree(path: Union[str, Path]) -> None:
    """Remove a directory and everything below it."""
    print(f"  Removing directory: {path}")
    subprocess.run(["sudo", "rm", "-rf", str(path)], check=True)


def clear_directory(path: Union[str, Path]) -> None:
    """Delete everything inside a directory, hidden entries included, keeping the directory."""
    print(f"  Clearing contents of: {path}")
    subprocess.run(
        ["sudo", "find", str(path), "-mindepth", "1", "-delete"],
        check=True,
    )


def render_template(template_name: str, context: dict) -> str:
    """
    Render a bundled Jinja2 template.

    Args:
        template_name: File name under mongosetup/templates
        context: Dictionary of variables to substitute

    Returns:
        Rendered template content
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        undefined=StrictUndefined,
    )
    return env.get_template(template_name).render(**context)
