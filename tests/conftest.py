"""Shared fixtures for mongosetup tests."""

import pytest

from mongosetup.settings import InstallConfig


@pytest.fixture
def config(tmp_path):
    """InstallConfig with every filesystem path under a temporary directory."""
    data_root = tmp_path / "data" / "mongodb"
    run_dir = tmp_path / "run" / "mongodb"
    return InstallConfig(
        data_root=data_root,
        db_path=data_root / "db",
        data_logs_dir=data_root / "logs",
        log_file=tmp_path / "log" / "mongod.log",
        pid_dir=run_dir,
        pid_file=run_dir / "mongod.pid",
        config_file=tmp_path / "etc" / "mongod.conf",
        status_script=tmp_path / "bin" / "mongodb-status",
        startup_delay=0,
        probe_hosts=["peer-1.mongodb.internal", "peer-2.mongodb.internal"],
    )
