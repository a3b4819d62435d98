"""Random password generation.

Used by the cascading provider to synthesize a password reset on backends
that can only update credentials.
"""

import secrets
from functools import partial
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from cascade_auth.config.settings import Settings

VOWELS = "aeiouy"
CONSONANTS = "bcdfghjklmnpqrstvwxz"
DIGITS = "0123456789"


def generate_random_password(letters: int = 6, digits: int = 2) -> str:
    """Generate a pronounceable random password.

    Alternates consonants and vowels, then appends random digits
    (e.g. "kodita42").

    Args:
        letters: Number of alternating letters
        digits: Number of trailing digits

    Returns:
        New password

    Raises:
        ValueError: If a length is negative or both are zero
    """
    if letters < 0 or digits < 0:
        raise ValueError("Password lengths must not be negative")
    if letters + digits == 0:
        raise ValueError("Password must contain at least one character")

    chars = [
        secrets.choice(CONSONANTS if i % 2 == 0 else VOWELS)
        for i in range(letters)
    ]
    chars.extend(secrets.choice(DIGITS) for _ in range(digits))
    return "".join(chars)


def password_generator_from_settings(settings: "Settings") -> Callable[[], str]:
    """Bind the configured password lengths to the generator"""
    return partial(
        generate_random_password,
        letters=settings.password_letters,
        digits=settings.password_digits,
    )
