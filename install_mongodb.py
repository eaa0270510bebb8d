#!/usr/bin/env python3
"""
install_mongodb - install, configure and verify MongoDB on Ubuntu.

Removes any previous MongoDB install, adds the official apt repository,
installs mongodb-org, writes /etc/mongod.conf for a single-member replica
set and checks that the server came up.

Usage:
    ./install_mongodb.py                  # Full install (same as `install`)
    ./install_mongodb.py install --yes    # Full install, remove old data without asking
    ./install_mongodb.py install -n       # Show what would be done
    ./install_mongodb.py clean            # Remove a previous install only
    ./install_mongodb.py verify           # Re-run the post-install checks
    ./install_mongodb.py info             # Show effective settings
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

# Add the package directory to path
sys.path.insert(0, str(Path(__file__).parent))

from mongosetup.base import BaseOrchestrator, FatalError
from mongosetup.checks import Verifier
from mongosetup.clean import Cleaner
from mongosetup.configure import Configurator, render_mongod_conf
from mongosetup.files import read_file
from mongosetup.packages import held_packages, is_installed
from mongosetup.paths import SETTINGS_FILE
from mongosetup.preflight import PreflightError, check_preflight
from mongosetup.provision import Provisioner
from mongosetup.report import Reporter
from mongosetup.services import enable_service, get_service_status, start_service
from mongosetup.settings import InstallConfig, load_config


class MongoInstaller(BaseOrchestrator):
    """Runs the install stages in order and collects their changes."""

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

    def _stage(self, stage: BaseOrchestrator) -> BaseOrchestrator:
        stage.run()
        self.changes.extend(stage.changes)
        return stage

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def preflight(self) -> None:
        try:
            check_preflight()
        except PreflightError as e:
            self.fatal(str(e))

    def clean(self) -> None:
        self._stage(Cleaner(
            self.config, dry_run=self.dry_run, verbose=self.verbose, assume_yes=self.assume_yes,
        ))

    def provision(self) -> None:
        self._stage(Provisioner(self.config, dry_run=self.dry_run, verbose=self.verbose))

    def configure(self) -> None:
        self._stage(Configurator(self.config, dry_run=self.dry_run, verbose=self.verbose))

    def activate(self) -> None:
        """Start and enable mongod, give it time to come up, then install the status helper."""
        service = self.config.service
        self.log("Starting MongoDB service...")
        if not self.dry_run:
            start_service(service)
            enable_service(service)
            self.record_change(f"Started and enabled {service}")

            self.log("Waiting for MongoDB to start...")
            time.sleep(self.config.startup_delay)

        helper = Configurator(self.config, dry_run=self.dry_run, verbose=self.verbose)
        helper.install_status_script()
        self.changes.extend(helper.changes)

    def verify(self) -> str:
        """
        Run the checks.

        Returns:
            The server version string reported by the checks
        """
        verifier = self._stage(Verifier(self.config, dry_run=self.dry_run, verbose=self.verbose))
        if self.verbose and not self.dry_run:
            status = get_service_status(self.config.service)
            self.log_verbose(f"{self.config.service} MainPID: {status.get('MainPID', '?')}")
        return verifier.version

    def report(self, version: str) -> None:
        self._stage(Reporter(
            self.config, version=version, dry_run=self.dry_run, verbose=self.verbose,
        ))

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def install_all(self) -> None:
        """Full install: clean, provision, configure, activate, verify, report."""
        self.log("=" * 60)
        self.log(f"Starting MongoDB {self.config.version} installation on Ubuntu ({self.config.distro})")
        self.log("=" * 60)
        self.log(f"Dry Run: {self.dry_run}")
        self.log("")

        self.preflight()
        self.clean()
        self.provision()
        self.configure()
        self.activate()
        version = self.verify()
        self.report(version)

        self.summarize("MongoDB install")
        self.success("Installation script completed!")

    def clean_only(self) -> None:
        self.preflight()
        self.clean()
        self.summarize("MongoDB cleanup")

    def verify_only(self) -> None:
        self.preflight()
        version = self.verify()
        self.report(version)

    def info(self) -> None:
        """Print effective settings and the state of the host."""
        cfg = self.config
        print(f"MongoDB Version: {cfg.version} ({cfg.distro})")
        print(f"Repository: {cfg.repo_line}")
        print(f"Repository List: {cfg.repo_list}")
        print(f"Keyring: {cfg.keyring}")
        print(f"Service: {cfg.service} (user {cfg.user}:{cfg.group})")
        print(f"Listen: {cfg.listen_address}")
        print(f"Replica Set: {cfg.replset}")
        print(f"Data Directory: {cfg.db_path}")
        print(f"Log File: {cfg.log_file}")
        print(f"Config File: {cfg.config_file}")
        print(f"Package Installed: {'yes' if is_installed(cfg.package) else 'no'}")

        held = held_packages()
        print(f"Held Packages: {', '.join(sorted(held & set(cfg.held_packages))) or 'none'}")

        current = read_file(cfg.config_file)
        if not current:
            state = "missing"
        elif current == render_mongod_conf(cfg):
            state = "matches settings"
        else:
            state = "differs from settings"
        print(f"Config State: {state}")
        print(f"Settings File: {SETTINGS_FILE}")
        print(f"Python: {sys.version}")


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Settings file (default: {SETTINGS_FILE})",
    )


def main(argv: Optional[list[str]] = None) -> int:
    # Common flags, accepted before or after the subcommand
    common_parser = argparse.ArgumentParser(add_help=False)
    _add_common_flags(common_parser)

    # Subcommand copies set nothing unless given, so flags typed before the
    # subcommand are not reset to their defaults
    subcommand_parser = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    _add_common_flags(subcommand_parser)

    parser = argparse.ArgumentParser(
        description="Install, configure and verify MongoDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
        parents=[common_parser],
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # install command
    install_parser = subparsers.add_parser(
        "install", help="Full install (default)", parents=[subcommand_parser]
    )
    install_parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Remove existing MongoDB data without asking",
    )

    # clean command
    clean_parser = subparsers.add_parser(
        "clean", help="Remove a previous install only", parents=[subcommand_parser]
    )
    clean_parser.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Remove existing MongoDB data without asking",
    )

    # verify command
    subparsers.add_parser("verify", help="Run the post-install checks", parents=[subcommand_parser])

    # info command
    subparsers.add_parser("info", help="Show effective settings", parents=[subcommand_parser])

    args = parser.parse_args(argv)
    command = args.command or "install"

    try:
        config = load_config(args.config)
        installer = MongoInstaller(
            config,
            dry_run=args.dry_run,
            verbose=args.verbose,
            assume_yes=getattr(args, "yes", False),
        )

        if command == "install":
            installer.install_all()

        elif command == "clean":
            installer.clean_only()

        elif command == "verify":
            installer.verify_only()

        elif command == "info":
            installer.info()

    except KeyboardInterrupt:
        print("\nAborted.")
        return 1
    except FatalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
