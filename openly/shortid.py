"""Short ID generation."""

import secrets
import string
from typing import Optional


class ShortIDGenerator:
    """Generate random short IDs for links."""

    # Lowercase letters and digits (36 characters)
    ALPHABET = string.ascii_lowercase + string.digits

    # First path segments served by other routes
    RESERVED = frozenset({
        "admin", "api", "delete", "health", "loginadmin", "logout",
        "new", "shorten", "static",
    })

    def __init__(self, default_length: int = 6):
        """Initialize short ID generator.

        Args:
            default_length: Length of generated IDs
        """
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short ID.

        Each character is drawn uniformly and independently from ALPHABET;
        draws that spell a reserved route name are discarded. Nothing is
        checked against existing IDs; the store's uniqueness constraint is
        the only guard.

        Args:
            length: Length of the ID (uses default if not specified)

        Returns:
            Random short ID
        """
        length = length or self.default_length
        while True:
            short_id = "".join(secrets.choice(self.ALPHABET) for _ in range(length))
            if short_id not in self.RESERVED:
                return short_id
