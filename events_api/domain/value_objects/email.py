"""Email value object"""

import re
from dataclasses import dataclass


_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class Email:
    """Email address, normalised to lower case so comparisons are case-insensitive"""

    value: str

    def __post_init__(self):
        normalized = self.value.strip().lower()
        if not _EMAIL_RE.match(normalized):
            raise ValueError("Invalid email address")
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
