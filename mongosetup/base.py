"""Base orchestrator class for mongosetup stages."""

from datetime import datetime
from typing import List


class FatalError(RuntimeError):
    """Raised when a step fails in a way that must abort the whole run."""


class BaseOrchestrator:
    """
    Base class for mongosetup orchestrator stages.

    Provides common functionality for dry-run mode, logging, and change tracking.
    All stage classes (Cleaner, Provisioner, Configurator, Verifier, Reporter)
    inherit from this class.
    """

    def __init__(self, dry_run: bool = False, verbose: bool = False):
        """
        Initialize the orchestrator.

        Args:
            dry_run: If True, only show what would be done without making changes
            verbose: If True, enable verbose output
        """
        self.dry_run = dry_run
        self.verbose = verbose
        self.changes: List[str] = []

    def log(self, msg: str) -> None:
        """
        Log a timestamped message with optional dry-run prefix.

        Args:
            msg: Message to log
        """
        prefix = "[DRY-RUN] " if self.dry_run else ""
        if msg:
            stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            print(f"{prefix}[{stamp}] {msg}")
        else:
            print(prefix.rstrip())

    def log_verbose(self, msg: str) -> None:
        """
        Log a message only if verbose mode is enabled.

        Args:
            msg: Message to log
        """
        if self.verbose:
            self.log(msg)

    def success(self, msg: str) -> None:
        """Log a passed step."""
        self.log(f"OK: {msg}")

    def warning(self, msg: str) -> None:
        """Log a non-fatal problem and carry on."""
        self.log(f"WARNING: {msg}")

    def fatal(self, msg: str) -> None:
        """
        Log an error and abort the run.

        Raises:
            FatalError: always
        """
        self.log(f"ERROR: {msg}")
        raise FatalError(msg)

    def record_change(self, description: str) -> None:
        """
        Record a change that was made.

        Args:
            description: Description of the change
        """
        self.changes.append(description)

    def summarize(self, title: str = "Summary") -> None:
        """
        Print a summary of changes made.

        Args:
            title: Title for the summary section
        """
        self.log("")
        self.log("=" * 60)
        self.log(title)
        if self.dry_run:
            self.log("Dry-run complete - no changes were made")
        elif self.changes:
            self.log(f"Changes made: {len(self.changes)}")
            for change in self.changes:
                self.log(f"  - {change}")
        else:
            self.log("No changes made")
        self.log("=" * 60)
