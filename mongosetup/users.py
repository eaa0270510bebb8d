"""System user and group management for the service account."""

import pwd
import subprocess


def user_exists(name: str) -> bool:
    """Check if a user account exists."""
    try:
        pwd.getpwnam(name)
    except KeyError:
        return False
    return True


def describe_user(name: str) -> str:
    """Get the `id` line for a user, or an empty string if unknown."""
    result = subprocess.run(["id", name], capture_output=True, text=True)
    if result.returncode != 0:
        return ""
    return result.stdout.strip()


def has_processes(name: str) -> bool:
    """Check whether any process is running as the user."""
    result = subprocess.run(
        ["pgrep", "-u", name],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


def remove_user(name: str, group: str) -> None:
    """Delete a user and its group (best-effort)."""
    print(f"Removing user {name} and group {group}")
    subprocess.run(["sudo", "userdel", name], capture_output=True)
    subprocess.run(["sudo", "groupdel", group], capture_output=True)


def create_system_user(name: str, group: str) -> bool:
    """
    Create a system group and a login-less, home-less system user in it.

    The group may already exist; that is not an error.

    Returns:
        True if the user exists afterwards
    """
    print(f"Creating system user {name} in group {group}")
    subprocess.run(["sudo", "groupadd", group], capture_output=True)
    subprocess.run(
        [
            "sudo", "useradd",
            "--system",
            "--no-create-home",
            "--shell", "/bin/false",
            "--gid", group,
            name,
        ],
        capture_output=True,
    )
    return user_exists(name)
