"""Password hashing for stored e-mail credentials."""
from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from dataclasses import dataclass

from .forms import validate_text_input
from .repositories import CredentialRepository


@dataclass
class PasswordService:
    """Hash and verify passwords using PBKDF2."""

    iterations: int = 120_000
    algorithm: str = "sha256"

    def _derive(self, password: str, salt: bytes, algorithm: str, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac(algorithm, password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        salt = secrets.token_bytes(16)
        digest = self._derive(password, salt, self.algorithm, self.iterations)
        parts = (
            "pbkdf2",
            self.algorithm,
            str(self.iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        )
        return "$".join(parts)

    def verify(self, password: str, stored_hash: str) -> bool:
        try:
            scheme, algorithm, iteration_str, salt_b64, hash_b64 = stored_hash.split("$")
            if scheme != "pbkdf2":
                return False
            salt = base64.b64decode(salt_b64)
            expected = base64.b64decode(hash_b64)
            derived = self._derive(password, salt, algorithm, int(iteration_str))
        except (ValueError, TypeError):
            return False
        return hmac.compare_digest(derived, expected)


@dataclass
class CredentialService:
    """Back the "Add Email" dialog."""

    credentials: CredentialRepository
    passwords: PasswordService

    def register(self, email: str, password: str) -> str | None:
        """Store ``email`` with a hash of ``password``; return an error message on bad input."""

        error = validate_text_input(email) or validate_text_input(password)
        if error:
            return error
        self.credentials.save(email.strip(), self.passwords.hash(password))
        return None

    def check(self, email: str, password: str) -> bool:
        stored = self.credentials.fetch_hash(email.strip())
        return bool(stored) and self.passwords.verify(password, stored)
