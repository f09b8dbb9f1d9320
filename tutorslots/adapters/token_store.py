"""
Storage for the tutor's API bearer token.

The token lives in the system keyring. When no keyring backend works the
store falls back to a plaintext file readable only by the current user.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


KEYRING_SERVICE_NAME = "tutorslots"


class TokenStore:
    """Persist and retrieve the bearer token used by ``ApiClient``."""

    def __init__(self, base_url: str, token_file: Path | None = None):
        """
        Initialize the token store.

        Args:
            base_url: API root; tokens are kept per API
            token_file: Optional path of the plaintext fallback file
        """
        self._key_identifier = base_url.rstrip("/")
        self.token_file = token_file or Path.home() / ".tutorslots_token"
        self._keyring_supported = True
        self._insecure_storage_warning: Optional[str] = None

    @property
    def backend(self) -> str:
        """Return the active storage backend (keyring or file)."""
        return "keyring" if self._keyring_supported else "file"

    @property
    def insecure_storage_warning(self) -> Optional[str]:
        """Provide a warning message when the token falls back to plaintext storage."""
        return self._insecure_storage_warning

    def save_token(self, token: str) -> None:
        token = token.strip()
        if not token:
            raise AuthenticationError("Refusing to store an empty token.")

        if self._keyring_supported:
            try:
                keyring.set_password(KEYRING_SERVICE_NAME, self._key_identifier, token)
                return
            except KeyringError as exc:  # pragma: no cover - environment dependent
                self._handle_keyring_failure(f"writing credentials failed: {exc}")

        self._save_token_to_file(token)

    def load_token(self) -> Optional[str]:
        if self._keyring_supported:
            try:
                token = keyring.get_password(KEYRING_SERVICE_NAME, self._key_identifier)
                if token:
                    return token
            except KeyringError as exc:  # pragma: no cover - environment dependent
                self._handle_keyring_failure(f"reading credentials failed: {exc}")

        return self._load_token_from_file()

    def require_token(self) -> str:
        """
        Return the stored token.

        Raises:
            AuthenticationError: If no token has been stored yet
        """
        token = self.load_token()
        if not token:
            raise AuthenticationError(
                "No API token stored. Run 'tutorslots login --token <token>' first."
            )
        return token

    def clear_token(self) -> None:
        """Forget the stored token (keyring and fallback file)."""
        if self.token_file.exists():
            self.token_file.unlink()
        try:
            keyring.delete_password(KEYRING_SERVICE_NAME, self._key_identifier)
        except PasswordDeleteError:
            logger.debug("No keyring entry to remove for %s", self._key_identifier)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            logger.warning("Could not remove credentials from keyring: %s", exc)

    def _load_token_from_file(self) -> Optional[str]:
        if self.token_file.exists():
            try:
                with open(self.token_file, "r", encoding="utf-8") as file_handle:
                    return file_handle.read().strip() or None
            except OSError as exc:
                logger.warning("Could not load token file %s: %s", self.token_file, exc)
        return None

    def _save_token_to_file(self, token: str) -> None:
        try:
            self.token_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_file, "w", encoding="utf-8") as file_handle:
                file_handle.write(token)
            self.token_file.chmod(0o600)
        except OSError as exc:
            raise AuthenticationError(f"Could not save token to {self.token_file}: {exc}") from exc

    def _handle_keyring_failure(self, reason: str) -> None:
        if self._keyring_supported:
            logger.warning(
                "Secure credential storage unavailable (%s). Falling back to plaintext file.",
                reason,
            )
        self._keyring_supported = False
        if not self._insecure_storage_warning:
            self._insecure_storage_warning = (
                f"Secure credential storage unavailable ({reason}). "
                f"Falling back to plaintext token file at {self.token_file}."
            )
