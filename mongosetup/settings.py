"""Install settings for mongosetup, loaded from configs/mongodb.toml."""

import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

from .paths import (
    DATA_LOGS_DIR,
    DATA_ROOT,
    DB_PATH,
    LOG_FILE,
    MONGOD_CONF,
    PID_DIR,
    PID_FILE,
    SETTINGS_FILE,
    STATUS_SCRIPT,
    TIMEZONE_INFO,
    get_keyring_path,
    get_repo_list_path,
)


@dataclass(frozen=True)
class InstallConfig:
    """Everything the installer needs to know about the target install."""

    # Release and repository
    version: str = "7.0"
    distro: str = "jammy"
    component: str = "multiverse"
    architectures: str = "amd64,arm64"
    key_url: str = "https://www.mongodb.org/static/pgp/server-7.0.asc"
    repo_url: str = "https://repo.mongodb.org/apt/ubuntu"

    # Packages
    package: str = "mongodb-org"
    prerequisites: list[str] = field(default_factory=lambda: [
        "curl", "wget", "gnupg", "lsb-release", "ca-certificates", "net-tools",
    ])
    held_packages: list[str] = field(default_factory=lambda: [
        "mongodb-org",
        "mongodb-org-database",
        "mongodb-org-server",
        "mongodb-org-mongos",
        "mongodb-org-tools",
    ])
    purge_patterns: list[str] = field(default_factory=lambda: [
        "mongodb-org", "mongodb-org-*", "mongodb", "mongodb-*",
    ])

    # Service and account
    service: str = "mongod"
    legacy_services: list[str] = field(default_factory=lambda: ["mongod", "mongodb"])
    user: str = "mongodb"
    group: str = "mongodb"

    # Filesystem
    data_root: Path = DATA_ROOT
    db_path: Path = DB_PATH
    data_logs_dir: Path = DATA_LOGS_DIR
    log_file: Path = LOG_FILE
    pid_dir: Path = PID_DIR
    pid_file: Path = PID_FILE
    config_file: Path = MONGOD_CONF
    status_script: Path = STATUS_SCRIPT
    timezone_info: Path = TIMEZONE_INFO
    dir_mode: int = 0o755

    # mongod.conf
    bind_ip: str = "0.0.0.0"
    port: int = 27017
    replset: str = "rs0"
    authorization: bool = False

    # Activation and checks
    startup_delay: float = 5.0
    server_binary: str = "mongod"
    shell_binary: str = "mongosh"
    error_marker: str = "ERROR"
    internal_domain: str = "mongodb.internal"
    probe_hosts: list[str] = field(default_factory=lambda: [
        "vm-mongodb-prod-itn-01.mongodb.internal",
        "vm-mongodb-prod-itn-02.mongodb.internal",
        "vm-mongodb-prod-itn-03.mongodb.internal",
    ])
    probe_timeout: int = 2

    @property
    def keyring(self) -> Path:
        return get_keyring_path(self.version)

    @property
    def repo_list(self) -> Path:
        return get_repo_list_path(self.version)

    @property
    def repo_line(self) -> str:
        """The apt source line for the MongoDB repository."""
        return (
            f"deb [ arch={self.architectures} signed-by={self.keyring} ] "
            f"{self.repo_url} {self.distro}/mongodb-org/{self.version} {self.component}"
        )

    @property
    def listen_address(self) -> str:
        return f"{self.bind_ip}:{self.port}"


def _is_number(value) -> bool:
    # TOML booleans are ints to Python
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce(name: str, value, default):
    """
    Convert a TOML value to the type of the field default.

    Raises:
        ValueError: If the value has the wrong TOML type
    """
    if isinstance(default, Path):
        if not isinstance(value, str):
            raise ValueError(f"Setting '{name}' must be a path string")
        return Path(value)
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"Setting '{name}' must be true or false")
        return value
    if isinstance(default, float):
        if not _is_number(value):
            raise ValueError(f"Setting '{name}' must be a number")
        return float(value)
    if isinstance(default, int):
        # Modes may be written as "0o755" strings
        if isinstance(value, str):
            try:
                return int(value, 0)
            except ValueError:
                raise ValueError(f"Setting '{name}' must be an integer") from None
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Setting '{name}' must be an integer")
        return value
    if isinstance(default, list):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"Setting '{name}' must be a list of strings")
        return list(value)
    if not isinstance(value, str):
        raise ValueError(f"Setting '{name}' must be a string")
    return value


def load_config(path: Optional[Path] = None) -> InstallConfig:
    """
    Load install settings from a TOML file.

    Tables are only for grouping: keys from every table are merged onto the
    InstallConfig defaults. A missing default settings file means defaults.

    Args:
        path: Settings file (defaults to configs/mongodb.toml)

    Returns:
        The effective InstallConfig

    Raises:
        FileNotFoundError: If an explicitly given file does not exist
        ValueError: On unknown keys or badly typed values
    """
    defaults = InstallConfig()
    if path is None:
        path = SETTINGS_FILE
        if not path.exists():
            return defaults

    with open(path, "rb") as f:
        data = tomllib.load(f)

    flat = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value

    known = {f.name for f in fields(InstallConfig)}
    unknown = sorted(set(flat) - known)
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")

    overrides = {
        name: _coerce(name, value, getattr(defaults, name))
        for name, value in flat.items()
    }

    # Keep the key URL in step with the version unless it was set explicitly
    if "version" in overrides and "key_url" not in overrides:
        overrides["key_url"] = f"https://www.mongodb.org/static/pgp/server-{overrides['version']}.asc"

    return replace(defaults, **overrides)
