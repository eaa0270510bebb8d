"""Tests for the low-level host helpers."""

import subprocess
from unittest.mock import MagicMock, call, patch

import pytest

from mongosetup import files, mounts, packages, services, users
from mongosetup.base import BaseOrchestrator, FatalError
from mongosetup.prompts import confirm

CompletedProcess = subprocess.CompletedProcess


def _completed(returncode: int = 0, stdout: str = "") -> MagicMock:
    return MagicMock(spec=CompletedProcess, returncode=returncode, stdout=stdout, stderr="")


class TestMounts:
    """Tests for mount handling."""

    def test_is_mountpoint(self):
        """Should use `mountpoint -q`."""
        with patch("mongosetup.mounts.subprocess.run", return_value=_completed(0)) as mock_run:
            assert mounts.is_mountpoint("/data/mongodb") is True

        assert mock_run.call_args[0][0] == ["mountpoint", "-q", "/data/mongodb"]

    def test_plain_unmount(self):
        """Should not force when the plain unmount works."""
        with patch("mongosetup.mounts.subprocess.run", return_value=_completed(0)) as mock_run:
            assert mounts.unmount("/data/mongodb") is False

        mock_run.assert_called_once_with(["sudo", "umount", "/data/mongodb"])

    def test_forced_unmount(self):
        """Should escalate to a forced unmount."""
        with patch(
            "mongosetup.mounts.subprocess.run",
            side_effect=[_completed(32), _completed(0)],
        ) as mock_run:
            assert mounts.unmount("/data/mongodb") is True

        assert mock_run.call_args_list[1] == call(["sudo", "umount", "-f", "/data/mongodb"])

    def test_unmount_gives_up(self):
        """Should raise with the manual command when both attempts fail."""
        with patch(
            "mongosetup.mounts.subprocess.run",
            side_effect=[_completed(32), _completed(32)],
        ):
            with pytest.raises(mounts.UnmountError, match="sudo umount /data/mongodb"):
                mounts.unmount("/data/mongodb")


class TestUsers:
    """Tests for service account helpers."""

    def test_user_exists(self):
        """Should look the user up in the password database."""
        with patch("mongosetup.users.pwd.getpwnam", side_effect=KeyError("mongodb")):
            assert users.user_exists("mongodb") is False
        with patch("mongosetup.users.pwd.getpwnam", return_value=MagicMock()):
            assert users.user_exists("mongodb") is True

    def test_create_system_user(self):
        """Should create a login-less system user in its group."""
        with patch("mongosetup.users.subprocess.run", return_value=_completed()) as mock_run, \
             patch("mongosetup.users.user_exists", return_value=True):
            assert users.create_system_user("mongodb", "mongodb") is True

        assert mock_run.call_args_list[0][0][0] == ["sudo", "groupadd", "mongodb"]
        assert mock_run.call_args_list[1][0][0] == [
            "sudo", "useradd", "--system", "--no-create-home",
            "--shell", "/bin/false", "--gid", "mongodb", "mongodb",
        ]

    def test_has_processes(self):
        """Should use pgrep's exit status."""
        with patch("mongosetup.users.subprocess.run", return_value=_completed(1)):
            assert users.has_processes("mongodb") is False


class TestPackages:
    """Tests for apt helpers."""

    def test_noninteractive_install(self):
        """Should pass DEBIAN_FRONTEND through sudo."""
        with patch("mongosetup.packages.subprocess.run", return_value=_completed()) as mock_run:
            packages.install(["mongodb-org"], noninteractive=True)

        mock_run.assert_called_once_with(
            ["sudo", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "mongodb-org"],
            check=True,
        )

    def test_ensure_packages_skips_installed(self):
        """Should only install what is missing."""
        with patch("mongosetup.packages.get_installed_packages", return_value={"curl", "wget"}), \
             patch("mongosetup.packages.install") as mock_install:
            assert packages.ensure_packages(["curl", "gnupg"]) == ["gnupg"]

        mock_install.assert_called_once_with(["gnupg"])

    def test_purge_is_best_effort(self):
        """Should not raise when nothing matched."""
        with patch("mongosetup.packages.subprocess.run", return_value=_completed(100)) as mock_run:
            assert packages.purge(["mongodb-org", "mongodb-*"]) is False

        assert mock_run.call_args[0][0] == [
            "sudo", "apt-get", "remove", "--purge", "-y", "mongodb-org", "mongodb-*",
        ]

    def test_held_packages(self):
        """Should parse `apt-mark showhold`."""
        with patch(
            "mongosetup.packages.subprocess.run",
            return_value=_completed(0, "mongodb-org\nmongodb-org-server\n"),
        ):
            assert packages.held_packages() == {"mongodb-org", "mongodb-org-server"}


class TestServices:
    """Tests for systemctl helpers."""

    def test_stop_if_active(self):
        """Should only stop a running service."""
        with patch("mongosetup.services._systemctl", return_value=_completed(3)) as mock_ctl:
            assert services.stop_if_active("mongod") is False

        mock_ctl.assert_called_once_with("is-active", "--quiet", "mongod", check=False)

    def test_active_state(self):
        """Should return the state word."""
        with patch("mongosetup.services._systemctl", return_value=_completed(3, "inactive\n")):
            assert services.active_state("mongod") == "inactive"

    def test_get_service_status(self):
        """Should parse `systemctl show` key=value output."""
        output = "MainPID=4242\nActiveState=active\n"
        with patch("mongosetup.services._systemctl", return_value=_completed(0, output)):
            assert services.get_service_status("mongod") == {
                "MainPID": "4242",
                "ActiveState": "active",
            }


class TestFiles:
    """Tests for file helpers."""

    def test_backup_file(self, tmp_path):
        """Should copy to a timestamped name next to the original."""
        conf = tmp_path / "mongod.conf"
        conf.write_text("net: {}\n")

        with patch("mongosetup.files.time.time", return_value=1700000000.5), \
             patch("mongosetup.files.subprocess.run") as mock_run:
            backup = files.backup_file(conf, label="backup")

        assert backup == tmp_path / "mongod.conf.backup.1700000000"
        mock_run.assert_called_once_with(["sudo", "cp", str(conf), str(backup)], check=True)

    def test_backup_missing_file(self, tmp_path):
        """Should do nothing for a file that is not there."""
        with patch("mongosetup.files.subprocess.run") as mock_run:
            assert files.backup_file(tmp_path / "mongod.conf", move=True) is None

        mock_run.assert_not_called()

    def test_remove_glob(self, tmp_path):
        """Should remove each match and report it."""
        (tmp_path / "mongod.log").write_text("")
        (tmp_path / "mongod.log.1").write_text("")
        (tmp_path / "other.log").write_text("")

        with patch("mongosetup.files.subprocess.run") as mock_run:
            removed = files.remove_glob(tmp_path, "mongod.log*")

        assert removed == [tmp_path / "mongod.log", tmp_path / "mongod.log.1"]
        assert mock_run.call_count == 2

    def test_clear_directory_keeps_directory(self, tmp_path):
        """Should delete only entries below the directory."""
        with patch("mongosetup.files.subprocess.run") as mock_run:
            files.clear_directory(tmp_path)

        mock_run.assert_called_once_with(
            ["sudo", "find", str(tmp_path), "-mindepth", "1", "-delete"],
            check=True,
        )

    def test_write_file(self, tmp_path):
        """Should write through sudo tee and set the mode."""
        path = tmp_path / "mongodb-status"
        with patch("mongosetup.files.subprocess.run") as mock_run:
            files.write_file(path, "#!/bin/bash\n", mode=0o755)

        assert mock_run.call_args_list == [
            call(["sudo", "tee", str(path)], input=b"#!/bin/bash\n",
                 stdout=subprocess.DEVNULL, check=True),
            call(["sudo", "chmod", "755", str(path)], check=True),
        ]


class TestBaseOrchestrator:
    """Tests for BaseOrchestrator."""

    def test_fatal_raises(self, capsys):
        """Should log and raise on fatal."""
        orchestrator = BaseOrchestrator()

        with pytest.raises(FatalError, match="boom"):
            orchestrator.fatal("boom")

        assert "ERROR: boom" in capsys.readouterr().out

    def test_dry_run_prefix(self, capsys):
        """Should mark dry-run output."""
        BaseOrchestrator(dry_run=True).warning("careful")

        out = capsys.readouterr().out
        assert out.startswith("[DRY-RUN] ")
        assert "WARNING: careful" in out


class TestConfirm:
    """Tests for confirm."""

    @pytest.mark.parametrize(
        "answers,expected",
        [
            (["y"], True),
            (["YES"], True),
            (["n"], False),
            ([""], False),
            (["maybe", "y"], True),
        ],
    )
    def test_answers(self, answers, expected):
        """Should accept y/n and default to no."""
        with patch("builtins.input", side_effect=answers):
            assert confirm("Remove data?") is expected

    def test_closed_stdin(self):
        """Should fall back to the default when stdin is closed."""
        with patch("builtins.input", side_effect=EOFError):
            assert confirm("Remove data?") is False
