"""MongoDB apt repository and signing key handling."""

import subprocess
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

from .files import remove_glob, write_file
from .paths import APT_SOURCES_DIR, KEYRINGS_DIR


class KeyImportError(RuntimeError):
    """Raised when the repository signing key could not be installed."""


def fetch_key(url: str, timeout: int = 30) -> bytes:
    """
    Download an ASCII-armored signing key.

    Raises:
        KeyImportError: On network failure or an empty response
    """
    try:
        with urlopen(url, timeout=timeout) as resp:
            data = resp.read()
    except (URLError, OSError) as e:
        raise KeyImportError(f"Failed to download signing key from {url}: {e}") from e

    if not data.strip():
        raise KeyImportError(f"Signing key download from {url} was empty")
    return data


def import_signing_key(url: str, keyring: Path) -> Path:
    """
    Fetch a signing key and store it dearmored at `keyring`.

    Returns:
        The keyring path

    Raises:
        KeyImportError: If the key could not be fetched or the keyring is missing afterwards
    """
    armored = fetch_key(url)

    print(f"Importing signing key to {keyring}")
    result = subprocess.run(
        ["sudo", "gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)],
        input=armored,
        capture_output=True,
    )
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip()
        raise KeyImportError(f"gpg --dearmor failed: {stderr or 'unknown error'}")

    if not keyring.exists():
        raise KeyImportError(f"Keyring {keyring} was not created")
    return keyring


def write_repo_list(path: Path, line: str) -> None:
    """Register an apt repository by writing its one-line source list."""
    print(f"Adding repository: {line}")
    write_file(path, line + "\n")


def remove_repositories() -> list[Path]:
    """
    Remove every MongoDB apt source list and keyring.

    Returns:
        The paths that were removed
    """
    removed = remove_glob(APT_SOURCES_DIR, "mongodb*.list")
    removed += remove_glob(KEYRINGS_DIR, "mongodb*.gpg")
    return removed
