"""APT package management for the MongoDB install."""

import subprocess
from typing import Optional


def _apt_get(
    *args: str,
    check: bool = True,
    env: Optional[dict] = None,
) -> subprocess.CompletedProcess:
    """Run an apt-get command with sudo."""
    cmd = ["sudo"]
    if env:
        # sudo resets the environment, so pass variables on its command line
        cmd += [f"{key}={value}" for key, value in env.items()]
    cmd += ["apt-get"] + list(args)
    return subprocess.run(cmd, check=check)


def update_indices() -> None:
    """Refresh package lists."""
    print("Updating package lists...")
    _apt_get("update", "-y")


def install(packages: list[str], noninteractive: bool = False) -> None:
    """Install packages (not idempotent - use ensure_packages instead)."""
    if not packages:
        return
    env = {"DEBIAN_FRONTEND": "noninteractive"} if noninteractive else None
    print(f"Installing: {', '.join(packages)}")
    _apt_get("install", "-y", *packages, env=env)


def get_installed_packages() -> set[str]:
    """
    Get all installed packages.

    More efficient than checking each package individually.
    """
    result = subprocess.run(
        ["dpkg-query", "-W", "-f=${Package}\n"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return set()
    return set(result.stdout.strip().split("\n"))


def is_installed(package: str) -> bool:
    """Check if a package is already installed."""
    result = subprocess.run(["dpkg", "-s", package], capture_output=True)
    return result.returncode == 0


def ensure_packages(packages: list[str]) -> list[str]:
    """
    Idempotently ensure packages are installed.

    Args:
        packages: List of package names to ensure are installed

    Returns:
        List of packages that were newly installed
    """
    installed = get_installed_packages()
    to_install = [p for p in packages if p not in installed]

    if to_install:
        install(to_install)
    else:
        print("All packages already installed")

    return to_install


def purge(patterns: list[str]) -> bool:
    """
    Remove and purge packages matching the given names or globs.

    Best-effort: missing packages are not an error.

    Returns:
        True if apt-get reported success
    """
    print(f"Purging: {' '.join(patterns)}")
    result = subprocess.run(
        ["sudo", "apt-get", "remove", "--purge", "-y"] + patterns,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    return result.returncode == 0


def autoremove() -> None:
    """Remove orphaned dependencies (best-effort)."""
    subprocess.run(
        ["sudo", "apt-get", "autoremove", "-y"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def clean_cache() -> None:
    """Clear the downloaded package cache."""
    _apt_get("clean")


def hold(packages: list[str]) -> None:
    """Pin packages at their installed version."""
    print(f"Holding: {' '.join(packages)}")
    subprocess.run(["sudo", "apt-mark", "hold"] + packages, check=True)


def held_packages() -> set[str]:
    """Get the set of packages currently on hold."""
    result = subprocess.run(
        ["apt-mark", "showhold"],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        return set()
    return {line.strip() for line in result.stdout.splitlines() if line.strip()}

