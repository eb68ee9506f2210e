"""bcrypt implementation of the password hashing collaborator."""

from dataclasses import dataclass

import bcrypt

from univ_erp.services.auth import PasswordHasher


@dataclass
class BcryptPasswordHasher(PasswordHasher):
    """Hashes passwords with bcrypt at a fixed cost factor."""

    rounds: int = 10

    def hash_password(self, plain_password: str) -> str:
        """Return a bcrypt hash of the password."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, plain_password: str, password_hash: str) -> bool:
        """Return whether the password matches; malformed hashes never match."""
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            return False
