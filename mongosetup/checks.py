"""Post-install verification checks."""

import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List

from . import services, shell
from .base import BaseOrchestrator
from .paths import get_user_home
from .settings import InstallConfig


class CheckStatus(Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass
class CheckResult:
    """Outcome of one verification check. A FAIL always aborts the run."""
    name: str
    status: CheckStatus
    message: str

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS


def listening_sockets() -> str:
    """Get the TCP listening socket table from `netstat -tlnp`."""
    result = subprocess.run(
        ["sudo", "netstat", "-tlnp"],
        capture_output=True,
        text=True,
    )
    return result.stdout


def is_listening(table: str, port: int) -> bool:
    """Check a socket table for any listener on `port`."""
    return f":{port}" in table


def binds_address(table: str, address: str) -> bool:
    """Check a socket table for a listener on exactly `address` (host:port)."""
    return address in table


def parse_count(output: str) -> int:
    """
    Extract a count from `grep -c` style output.

    Only the first line is used, and within it the first run of digits.
    Anything unparseable counts as zero.
    """
    first_line = output.splitlines()[0] if output.strip() else ""
    match = re.search(r"\d+", first_line)
    return int(match.group()) if match else 0


def count_log_errors(log_file: Path, marker: str = "ERROR") -> int:
    """Count lines containing `marker` in a root-readable log file."""
    result = subprocess.run(
        ["sudo", "grep", "-c", marker, str(log_file)],
        capture_output=True,
        text=True,
    )
    return parse_count(result.stdout)


class Verifier(BaseOrchestrator):
    """Runs the post-install checks, in order, aborting on fatal failures."""

    def __init__(self, config: InstallConfig, dry_run: bool = False, verbose: bool = False):
        super().__init__(dry_run=dry_run, verbose=verbose)
        self.config = config
        self.results: List[CheckResult] = []
        self.version: str = ""

    def _result(self, name: str, status: CheckStatus, message: str) -> CheckResult:
        return CheckResult(name=name, status=status, message=message)

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def check_service_active(self) -> CheckResult:
        service = self.config.service
        if services.is_active(service):
            return self._result("service", CheckStatus.PASS, f"MongoDB service {service} is running")
        return self._result("service", CheckStatus.FAIL, f"MongoDB service {service} is not running")

    def check_port_listening(self) -> CheckResult:
        port = self.config.port
        if is_listening(listening_sockets(), port):
            return self._result("port", CheckStatus.PASS, f"MongoDB is listening on port {port}")
        return self._result("port", CheckStatus.FAIL, f"MongoDB is not listening on port {port}")

    def check_bind_address(self) -> CheckResult:
        address = self.config.listen_address
        if binds_address(listening_sockets(), address):
            return self._result(
                "bind", CheckStatus.PASS, f"MongoDB is binding to all interfaces ({address})",
            )
        return self._result("bind", CheckStatus.WARN, "MongoDB may not be binding to all interfaces")

    def check_version(self) -> CheckResult:
        self.version = shell.server_version(self.config.server_binary)
        return self._result("version", CheckStatus.PASS, f"MongoDB version: {self.version or 'unknown'}")

    def check_connection(self) -> CheckResult:
        if shell.ping(self.config.shell_binary):
            return self._result("connection", CheckStatus.PASS, "MongoDB connection test successful")
        return self._result("connection", CheckStatus.FAIL, "MongoDB connection test failed")

    def _prepare_client_dir(self) -> None:
        """Create ~/.mongodb for the shell's own state (best-effort)."""
        try:
            (get_user_home() / ".mongodb").mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.log_verbose(f"Could not create client directory: {e}")

    def check_roundtrip(self) -> CheckResult:
        self._prepare_client_dir()
        outcome, tail = shell.roundtrip(self.config.shell_binary)
        self.log_verbose(f"Round-trip output: {tail!r}")

        if outcome is shell.RoundTripOutcome.INSERTED:
            return self._result("roundtrip", CheckStatus.PASS, "Basic MongoDB operations test successful")
        if outcome is shell.RoundTripOutcome.REPLICA_SET_NOT_INITIALIZED:
            return self._result(
                "roundtrip",
                CheckStatus.PASS,
                "MongoDB connection successful (replica set not yet initialized - expected)",
            )
        if outcome is shell.RoundTripOutcome.PING_OK:
            return self._result("roundtrip", CheckStatus.PASS, "Basic MongoDB ping test successful")

        self.warning(f"Basic MongoDB operations test inconclusive. Result: {tail}")
        if shell.ping_ok(self.config.shell_binary):
            return self._result(
                "roundtrip",
                CheckStatus.WARN,
                "MongoDB ping test successful (write operations may require replica set initialization)",
            )
        return self._result("roundtrip", CheckStatus.FAIL, "MongoDB basic connectivity test failed")

    def check_replset(self) -> CheckResult:
        state, lines = shell.replset_status(self.config.shell_binary)
        if state is shell.ReplSetState.NOT_INITIALIZED:
            return self._result(
                "replset",
                CheckStatus.PASS,
                "Replica set configuration detected (not yet initialized - expected)",
            )
        if state is shell.ReplSetState.INITIALIZED:
            return self._result("replset", CheckStatus.PASS, "Replica set is already initialized")
        return self._result("replset", CheckStatus.WARN, f"Replica set status unclear: {lines}")

    def check_log_errors(self) -> CheckResult:
        log_file = self.config.log_file
        count = count_log_errors(log_file, self.config.error_marker)
        if count == 0:
            return self._result("logs", CheckStatus.PASS, "No errors found in MongoDB logs")
        return self._result(
            "logs",
            CheckStatus.WARN,
            f"Found {count} errors in MongoDB logs (check with: sudo tail -20 {log_file})",
        )

    # -------------------------------------------------------------------------
    # Runner
    # -------------------------------------------------------------------------

    def checks(self) -> List[Callable[[], CheckResult]]:
        """The checks in the order they run."""
        return [
            self.check_service_active,
            self.check_port_listening,
            self.check_bind_address,
            self.check_version,
            self.check_connection,
            self.check_roundtrip,
            self.check_replset,
            self.check_log_errors,
        ]

    def report(self, result: CheckResult) -> None:
        """Log a result, aborting the run if it failed."""
        if result.status is CheckStatus.PASS:
            self.success(result.message)
        elif result.status is CheckStatus.WARN:
            self.warning(result.message)
        else:
            self.fatal(result.message)

    def run(self) -> List[CheckResult]:
        """
        Run every check.

        Returns:
            The results, in order

        Raises:
            FatalError: On the first fatal failure
        """
        self.log("=== Running verification tests ===")
        if self.dry_run:
            self.log("Would run verification tests")
            return []

        for check in self.checks():
            result = check()
            self.results.append(result)
            self.report(result)

        return self.results

