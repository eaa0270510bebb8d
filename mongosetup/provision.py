"""Repository registration and package installation."""

from .base import BaseOrchestrator
from .packages import ensure_packages, hold, install, update_indices
from .repository import KeyImportError, import_signing_key, write_repo_list
from .settings import InstallConfig


class Provisioner(BaseOrchestrator):
    """Adds the MongoDB apt repository and installs the server packages."""

    def __init__(self, config: InstallConfig, dry_run: bool = False, verbose: bool = False):
        super().__init__(dry_run=dry_run, verbose=verbose)
        self.config = config

    def install_prerequisites(self) -> None:
        self.log("Updating system packages...")
        if not self.dry_run:
            update_indices()

        self.log("Installing required packages...")
        self.log_verbose(f"  {' '.join(self.config.prerequisites)}")
        if not self.dry_run:
            installed = ensure_packages(self.config.prerequisites)
            if installed:
                self.record_change(f"Installed {len(installed)} prerequisite packages")

    def import_key(self) -> None:
        """Import the signing key; nothing else may run if this fails."""
        self.log("Importing MongoDB GPG key...")
        if self.dry_run:
            self.log(f"Would import {self.config.key_url} to {self.config.keyring}")
            return

        try:
            import_signing_key(self.config.key_url, self.config.keyring)
        except KeyImportError as e:
            self.fatal(f"Failed to import MongoDB GPG key: {e}")

        self.record_change(f"Imported signing key: {self.config.keyring}")
        self.success("MongoDB GPG key imported")

    def add_repository(self) -> None:
        self.log("Adding MongoDB repository...")
        self.log_verbose(f"  {self.config.repo_line}")
        if not self.dry_run:
            write_repo_list(self.config.repo_list, self.config.repo_line)
            self.record_change(f"Added repository: {self.config.repo_list}")

            self.log("Updating package list with MongoDB repository...")
            update_indices()

    def install_server(self) -> None:
        self.log(f"Installing MongoDB {self.config.version}...")
        if not self.dry_run:
            install([self.config.package], noninteractive=True)
            self.record_change(f"Installed {self.config.package}")

        self.log("Holding MongoDB packages...")
        if not self.dry_run:
            hold(self.config.held_packages)
            self.record_change(f"Held {len(self.config.held_packages)} packages")

    def run(self) -> None:
        """Run the provisioning sequence."""
        self.log(f"=== Installing MongoDB {self.config.version} ===")

        self.install_prerequisites()
        self.import_key()
        self.add_repository()
        self.install_server()
