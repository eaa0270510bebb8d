"""Cleanup of any previous MongoDB installation."""

from .base import BaseOrchestrator
from .files import backup_file, clear_directory, remove_file, remove_glob, remove_tree
from .mounts import UnmountError, is_mountpoint, unmount
from .packages import autoremove, clean_cache, purge
from .prompts import confirm
from .repository import remove_repositories
from .services import daemon_reload, is_active, reset_failed, stop_if_active
from .settings import InstallConfig
from .users import has_processes, remove_user, user_exists


class Cleaner(BaseOrchestrator):
    """
    Removes every trace of a prior install so the provisioning run starts clean.

    Everything here is best-effort except the data directory unmount, which
    aborts the run when even a forced unmount fails.
    """

    def __init__(
        self,
        config: InstallConfig,
        dry_run: bool = False,
        verbose: bool = False,
        assume_yes: bool = False,
    ):
        super().__init__(dry_run=dry_run, verbose=verbose)
        self.config = config
        self.assume_yes = assume_yes

    def stop_services(self) -> None:
        """Stop the current and legacy service names if they are running."""
        for service in self.config.legacy_services:
            if self.dry_run:
                if is_active(service):
                    self.log(f"Would stop existing {service} service")
                continue

            if stop_if_active(service):
                self.warning(f"Stopped existing {service} service")
                self.record_change(f"Stopped service: {service}")

    def remove_packages(self) -> None:
        self.log("Removing existing MongoDB packages...")
        if not self.dry_run:
            purge(self.config.purge_patterns)
            autoremove()

    def remove_repository_files(self) -> None:
        self.log("Cleaning up existing MongoDB repositories...")
        if not self.dry_run:
            for path in remove_repositories():
                self.record_change(f"Removed: {path}")
            clean_cache()

    def _confirm_data_removal(self) -> bool:
        if self.assume_yes:
            return True
        return confirm("Do you want to remove existing MongoDB data?", default=False)

    def remove_data(self) -> None:
        """
        Remove the data directory after confirmation.

        If the data directory is itself a mount point it is unmounted first.
        If its parent is the mount point only the contents are deleted, so the
        mount stays in place.
        """
        data_root = self.config.data_root
        if not data_root.is_dir():
            return

        self.warning(f"Found existing MongoDB data directory: {data_root}")
        if self.dry_run:
            self.log(f"Would ask before removing {data_root}")
            return

        if not self._confirm_data_removal():
            self.warning("Keeping existing data directory (may cause conflicts)")
            return

        self.log("Removing existing MongoDB data directory...")

        if is_mountpoint(data_root):
            self.log(f"Unmounting {data_root}...")
            try:
                if unmount(data_root):
                    self.warning(f"Needed a forced unmount of {data_root}")
            except UnmountError as e:
                self.fatal(str(e))

        if is_mountpoint(data_root.parent):
            self.log(f"Data disk is mounted at {data_root.parent}, removing contents only...")
            clear_directory(data_root)
        else:
            remove_tree(data_root)

        self.record_change(f"Removed data: {data_root}")
        self.success("Existing MongoDB data removed")

    def remove_runtime_files(self) -> None:
        """Remove logs and the PID file."""
        log_file = self.config.log_file
        if log_file.is_file():
            self.log("Removing existing MongoDB log files...")
            if not self.dry_run:
                for path in remove_glob(log_file.parent, f"{log_file.name}*"):
                    self.record_change(f"Removed: {path}")

        if not self.dry_run and remove_file(self.config.pid_file):
            self.record_change(f"Removed: {self.config.pid_file}")

    def remove_account(self) -> None:
        """Remove the service account, unless something still runs as it."""
        user = self.config.user
        if not user_exists(user):
            return

        if has_processes(user):
            self.warning(f"MongoDB processes still running, keeping {user} user")
            return

        self.log(f"Removing existing {user} user...")
        if not self.dry_run:
            remove_user(user, self.config.group)
        self.record_change(f"Removed user: {user}")

    def retire_config(self) -> None:
        """Move the existing config aside and remove the status helper."""
        config_file = self.config.config_file
        if config_file.exists():
            self.log("Backing up existing MongoDB configuration...")
            if not self.dry_run:
                backup = backup_file(config_file, label="cleanup.backup", move=True)
                self.record_change(f"Moved {config_file} to {backup}")

        if not self.dry_run and remove_file(self.config.status_script):
            self.record_change(f"Removed: {self.config.status_script}")

    def reset_systemd(self) -> None:
        if not self.dry_run:
            daemon_reload()
            reset_failed()

    def run(self) -> None:
        """Run the full cleanup sequence."""
        self.log("=== Cleaning up any existing MongoDB installations ===")

        self.stop_services()
        self.remove_packages()
        self.remove_repository_files()
        self.remove_data()
        self.remove_runtime_files()
        self.remove_account()
        self.retire_config()
        self.reset_systemd()

        self.success("Cleanup completed")
