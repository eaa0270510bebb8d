"""Systemd service management for the mongod unit."""

import subprocess


def _systemctl(*args: str, check: bool = True) -> subprocess.CompletedProcess:
    """Run a systemctl command."""
    cmd = ["sudo", "systemctl"] + list(args)
    return subprocess.run(cmd, capture_output=True, text=True, check=check)


def is_active(service: str) -> bool:
    """Check if a service is currently running."""
    result = _systemctl("is-active", "--quiet", service, check=False)
    return result.returncode == 0


def active_state(service: str) -> str:
    """Get the state word printed by `systemctl is-active` (e.g. "active")."""
    result = _systemctl("is-active", service, check=False)
    return result.stdout.strip() or "unknown"


def enabled_state(service: str) -> str:
    """Get the state word printed by `systemctl is-enabled` (e.g. "enabled")."""
    result = _systemctl("is-enabled", service, check=False)
    return result.stdout.strip() or "unknown"


def start_service(service: str) -> None:
    """Start a service."""
    print(f"Starting {service}")
    _systemctl("start", service)


def enable_service(service: str) -> None:
    """Enable a service at boot."""
    print(f"Enabling {service}")
    _systemctl("enable", service)


def stop_service(service: str) -> None:
    """Stop a service."""
    print(f"Stopping {service}")
    _systemctl("stop", service)


def stop_if_active(service: str) -> bool:
    """
    Stop a service only if it is running.

    Returns:
        True if the service was stopped
    """
    if not is_active(service):
        return False
    stop_service(service)
    return True


def daemon_reload() -> None:
    """Reload systemd daemon after unit or package changes."""
    print("Reloading systemd daemon")
    _systemctl("daemon-reload")


def reset_failed() -> None:
    """Clear failed unit state (best-effort)."""
    _systemctl("reset-failed", check=False)


def get_service_status(service: str) -> dict:
    """Get detailed status of a service."""
    result = _systemctl("show", service, "--no-page", check=False)

    status = {}
    for line in result.stdout.strip().split("\n"):
        if "=" in line:
            key, value = line.split("=", 1)
            status[key] = value

    return status
