"""Centralized path constants for mongosetup.

This module provides the path defaults used throughout mongosetup.
Anything here can be overridden from configs/mongodb.toml; see settings.py.
"""

from pathlib import Path

# Project paths (relative to this file's location)
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
CONFIGS_DIR = PROJECT_ROOT / "configs"
SETTINGS_FILE = CONFIGS_DIR / "mongodb.toml"
TEMPLATES_DIR = Path(__file__).parent / "templates"

# System paths - apt
APT_SOURCES_DIR = Path("/etc/apt/sources.list.d")
KEYRINGS_DIR = Path("/usr/share/keyrings")

# System paths - mongod
MONGOD_CONF = Path("/etc/mongod.conf")
DATA_ROOT = Path("/data/mongodb")
DB_PATH = DATA_ROOT / "db"
DATA_LOGS_DIR = DATA_ROOT / "logs"
LOG_FILE = Path("/var/log/mongodb/mongod.log")
PID_DIR = Path("/var/run/mongodb")
PID_FILE = PID_DIR / "mongod.pid"
TIMEZONE_INFO = Path("/usr/share/zoneinfo")

# Helper installed for operators
STATUS_SCRIPT = Path("/usr/local/bin/mongodb-status")


# User paths
def get_user_home() -> Path:
    """
    Get real user's home directory (handles sudo).

    When running under sudo, returns the original user's home directory,
    not root's home.
    """
    import os
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        import pwd
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            pass
    return Path.home()


def get_keyring_path(version: str) -> Path:
    """Get the dearmored signing key path for a MongoDB release series."""
    return KEYRINGS_DIR / f"mongodb-server-{version}.gpg"


def get_repo_list_path(version: str) -> Path:
    """Get the apt source list path for a MongoDB release series."""
    return APT_SOURCES_DIR / f"mongodb-org-{version}.list"
