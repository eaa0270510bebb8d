"""Tests for the signing key and apt repository helpers."""

import subprocess
from unittest.mock import MagicMock, patch
from urllib.error import URLError

import pytest

from mongosetup.repository import (
    KeyImportError,
    fetch_key,
    import_signing_key,
    remove_repositories,
    write_repo_list,
)

ARMORED_KEY = b"-----BEGIN PGP PUBLIC KEY BLOCK-----\nmQINBGPILWABEACqeWP/\n-----END PGP PUBLIC KEY BLOCK-----\n"


def _response(body: bytes) -> MagicMock:
    response = MagicMock()
    response.__enter__.return_value.read.return_value = body
    return response


class TestFetchKey:
    """Tests for fetch_key."""

    def test_network_failure(self):
        """Should turn a network error into a key import error."""
        with patch("mongosetup.repository.urlopen", side_effect=URLError("unreachable")):
            with pytest.raises(KeyImportError, match="Failed to download"):
                fetch_key("https://www.mongodb.org/static/pgp/server-7.0.asc")

    def test_empty_body(self):
        """Should reject an empty download."""
        with patch("mongosetup.repository.urlopen", return_value=_response(b"\n")):
            with pytest.raises(KeyImportError, match="empty"):
                fetch_key("https://www.mongodb.org/static/pgp/server-7.0.asc")


class TestImportSigningKey:
    """Tests for import_signing_key."""

    def test_network_failure_runs_no_gpg(self, tmp_path):
        """Should not call gpg when the key could not be downloaded."""
        with patch("mongosetup.repository.urlopen", side_effect=URLError("unreachable")), \
             patch("mongosetup.repository.subprocess.run") as mock_run:
            with pytest.raises(KeyImportError):
                import_signing_key("https://example.invalid/key.asc", tmp_path / "key.gpg")

        mock_run.assert_not_called()

    def test_dearmor_failure(self, tmp_path):
        """Should report gpg's error output."""
        failed = MagicMock(
            spec=subprocess.CompletedProcess,
            returncode=2,
            stderr=b"gpg: no valid OpenPGP data found.",
        )
        with patch("mongosetup.repository.urlopen", return_value=_response(ARMORED_KEY)), \
             patch("mongosetup.repository.subprocess.run", return_value=failed):
            with pytest.raises(KeyImportError, match="no valid OpenPGP data"):
                import_signing_key("https://example.invalid/key.asc", tmp_path / "key.gpg")

    def test_missing_keyring(self, tmp_path):
        """Should fail when gpg succeeded but the keyring is not there."""
        ok = MagicMock(spec=subprocess.CompletedProcess, returncode=0, stderr=b"")
        with patch("mongosetup.repository.urlopen", return_value=_response(ARMORED_KEY)), \
             patch("mongosetup.repository.subprocess.run", return_value=ok):
            with pytest.raises(KeyImportError, match="was not created"):
                import_signing_key("https://example.invalid/key.asc", tmp_path / "key.gpg")

    def test_success(self, tmp_path):
        """Should pipe the armored key through gpg --dearmor."""
        keyring = tmp_path / "key.gpg"
        keyring.write_bytes(b"\x99\x02\x0d")
        ok = MagicMock(spec=subprocess.CompletedProcess, returncode=0, stderr=b"")

        with patch("mongosetup.repository.urlopen", return_value=_response(ARMORED_KEY)), \
             patch("mongosetup.repository.subprocess.run", return_value=ok) as mock_run:
            assert import_signing_key("https://example.invalid/key.asc", keyring) == keyring

        mock_run.assert_called_once_with(
            ["sudo", "gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)],
            input=ARMORED_KEY,
            capture_output=True,
        )


class TestRepositoryFiles:
    """Tests for repository list handling."""

    def test_write_repo_list(self, tmp_path):
        """Should write the source line followed by a newline."""
        path = tmp_path / "mongodb-org-7.0.list"
        with patch("mongosetup.repository.write_file") as mock_write:
            write_repo_list(path, "deb [ arch=amd64 ] https://repo jammy/mongodb-org/7.0 multiverse")

        mock_write.assert_called_once_with(
            path, "deb [ arch=amd64 ] https://repo jammy/mongodb-org/7.0 multiverse\n",
        )

    def test_remove_repositories(self, tmp_path):
        """Should remove every MongoDB source list and keyring."""
        with patch("mongosetup.repository.APT_SOURCES_DIR", tmp_path / "sources"), \
             patch("mongosetup.repository.KEYRINGS_DIR", tmp_path / "keyrings"), \
             patch("mongosetup.repository.remove_glob", return_value=[]) as mock_glob:
            remove_repositories()

        assert [c.args for c in mock_glob.call_args_list] == [
            (tmp_path / "sources", "mongodb*.list"),
            (tmp_path / "keyrings", "mongodb*.gpg"),
        ]
