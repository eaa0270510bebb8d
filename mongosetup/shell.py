"""Thin wrappers around the mongod and mongosh binaries, and output classification."""

import re
import socket
import subprocess
from enum import Enum, auto


class RoundTripOutcome(Enum):
    INSERTED = auto()
    REPLICA_SET_NOT_INITIALIZED = auto()
    PING_OK = auto()
    INCONCLUSIVE = auto()


class ReplSetState(Enum):
    NOT_INITIALIZED = auto()
    INITIALIZED = auto()
    UNKNOWN = auto()


INSERT_MARKER = "INSERT_SUCCESS"
NOT_INITIALIZED_MARKER = "REPLICA_SET_NOT_INITIALIZED"

ROUNDTRIP_SCRIPT = """
try {
    db = db.getSiblingDB('testdb');
    db.testcol.insertOne({test: 'installation_verification', timestamp: new Date(), hostname: '%(hostname)s'});
    print('INSERT_SUCCESS');
    db.testcol.find({test: 'installation_verification'}).count();
} catch(e) {
    if (e.codeName === 'NotWritablePrimary' || e.codeName === 'NotPrimaryOrSecondary') {
        print('REPLICA_SET_NOT_INITIALIZED');
        db.runCommand('ping').ok;
    } else {
        print('ERROR: ' + e);
        0;
    }
}
"""

PING_SCRIPT = "db.runCommand('ping')"
PING_OK_SCRIPT = "db.runCommand('ping').ok"
REPLSET_SCRIPT = "try { rs.status() } catch(e) { print(e.codeName) }"


def eval_script(script: str, shell: str = "mongosh") -> subprocess.CompletedProcess:
    """Evaluate JavaScript with the mongo shell against the local server."""
    return subprocess.run(
        [shell, "--eval", script, "--quiet"],
        capture_output=True,
        text=True,
    )


def last_lines(output: str, count: int) -> str:
    """Get the last `count` lines of output, like `tail -n`."""
    lines = output.rstrip("\n").split("\n")
    return "\n".join(lines[-count:])


def server_version(binary: str = "mongod") -> str:
    """First line of `mongod --version`, or an empty string if unavailable."""
    try:
        result = subprocess.run([binary, "--version"], capture_output=True, text=True)
    except FileNotFoundError:
        return ""
    if not result.stdout:
        return ""
    return result.stdout.splitlines()[0].strip()


def ping(shell: str = "mongosh") -> bool:
    """Check the server answers a ping command."""
    try:
        result = eval_script(PING_SCRIPT, shell)
    except FileNotFoundError:
        return False
    return result.returncode == 0


def ping_ok(shell: str = "mongosh") -> bool:
    """Check that the last line printed for `ping().ok` is exactly `1`."""
    try:
        result = eval_script(PING_OK_SCRIPT, shell)
    except FileNotFoundError:
        return False
    return last_lines(result.stdout, 1).strip() == "1"


def classify_roundtrip(output: str) -> RoundTripOutcome:
    """
    Classify the tail of the round-trip script output.

    The marker is looked for together with a `1` anywhere in the text:
    a count of one inserted document, or a ping `ok` of one.
    """
    if INSERT_MARKER in output and "1" in output:
        return RoundTripOutcome.INSERTED
    if NOT_INITIALIZED_MARKER in output and "1" in output:
        return RoundTripOutcome.REPLICA_SET_NOT_INITIALIZED
    if "1" in output:
        return RoundTripOutcome.PING_OK
    return RoundTripOutcome.INCONCLUSIVE


def roundtrip(shell: str = "mongosh", hostname: str = "") -> tuple[RoundTripOutcome, str]:
    """
    Insert a marker document into testdb.testcol and count it back.

    Returns:
        Tuple of (outcome, the last two output lines it was classified from)
    """
    script = ROUNDTRIP_SCRIPT % {"hostname": hostname or socket.gethostname()}
    try:
        result = eval_script(script, shell)
    except FileNotFoundError:
        return RoundTripOutcome.INCONCLUSIVE, ""
    tail = last_lines(result.stdout, 2)
    return classify_roundtrip(tail), tail


def _replset_lines(output: str) -> str:
    """Keep only lines naming NotYetInitialized or ok, like `grep -E`."""
    return "\n".join(
        line for line in output.splitlines()
        if re.search(r"(NotYetInitialized|ok)", line)
    )


def classify_replset(output: str) -> ReplSetState:
    """Classify `rs.status()` output."""
    relevant = _replset_lines(output)
    if "NotYetInitialized" in relevant:
        return ReplSetState.NOT_INITIALIZED
    if "ok" in relevant:
        return ReplSetState.INITIALIZED
    return ReplSetState.UNKNOWN


def replset_status(shell: str = "mongosh") -> tuple[ReplSetState, str]:
    """
    Query replica set status.

    Returns:
        Tuple of (state, the filtered output lines)
    """
    try:
        result = eval_script(REPLSET_SCRIPT, shell)
    except FileNotFoundError:
        return ReplSetState.UNKNOWN, ""
    return classify_replset(result.stdout), _replset_lines(result.stdout)
