"""
generator.py - Secure password generation using cryptographically secure randomness
"""
import string
from dataclasses import dataclass, replace
from typing import List, Optional

from .errors import ConstraintError
from .random_source import random_index

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
NUMBERS = string.digits
SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# Characters that look alike (I is in here because it is a twin of l)
SIMILAR_CHARS = "il1Lo0OI"
# Characters that are easy to misread or mistype in some fonts and shells
AMBIGUOUS_CHARS = "{}[]()/\\'\"`~,;.<>"


@dataclass(frozen=True)
class PasswordOptions:
    """What a generated password must look like"""

    length: int = 16
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_special_chars: bool = True
    number_count: int = 1
    special_char_count: int = 1
    exclude_similar: bool = False
    exclude_ambiguous: bool = False


DEFAULT_PASSWORD_OPTIONS = PasswordOptions(
    length=16,
    number_count=2,
    special_char_count=2,
    exclude_similar=True,
)


def _alphabet(chars: str, options: PasswordOptions) -> str:
    if options.exclude_similar:
        chars = "".join(c for c in chars if c not in SIMILAR_CHARS)
    if options.exclude_ambiguous:
        chars = "".join(c for c in chars if c not in AMBIGUOUS_CHARS)
    return chars


def _pick(chars: str) -> str:
    return chars[random_index(len(chars))]


def _shuffle(chars: List[str]) -> None:
    """Fisher-Yates in place, every swap index from the secure source"""
    for i in range(len(chars) - 1, 0, -1):
        j = random_index(i + 1)
        chars[i], chars[j] = chars[j], chars[i]


def generate_password(options: Optional[PasswordOptions] = None, **overrides) -> str:
    """
    Generate a cryptographically secure random password.

    Args:
        options: PasswordOptions to start from (default: DEFAULT_PASSWORD_OPTIONS)
        **overrides: Individual PasswordOptions fields to change,
            e.g. generate_password(length=24, include_special_chars=False)

    Returns:
        A random password of exactly options.length characters that holds
        at least number_count digits, special_char_count specials and one
        character of every other enabled class

    Raises:
        ConstraintError: If no class is enabled, or the length cannot fit
            the required characters
    """
    options = replace(options or DEFAULT_PASSWORD_OPTIONS, **overrides)

    if options.length < 1:
        raise ConstraintError("Password length must be at least 1")
    if options.number_count < 0 or options.special_char_count < 0:
        raise ConstraintError("Required character counts cannot be negative")

    classes = [
        (options.include_uppercase, UPPERCASE, 1),
        (options.include_lowercase, LOWERCASE, 1),
        (options.include_numbers, NUMBERS, options.number_count or 1),
        (options.include_special_chars, SPECIAL_CHARS, options.special_char_count or 1),
    ]

    charset = ""
    required: List[str] = []

    for enabled, chars, count in classes:
        if not enabled:
            continue
        chars = _alphabet(chars, options)
        if not chars:
            continue
        charset += chars
        required.extend(_pick(chars) for _ in range(count))

    if not charset:
        raise ConstraintError("At least one character type must be selected")

    remaining = options.length - len(required)
    if remaining < 0:
        raise ConstraintError(
            f"Password length {options.length} is too short for the "
            f"{len(required)} required characters"
        )

    password = required + [_pick(charset) for _ in range(remaining)]

    # Required characters sit at the front until shuffled
    _shuffle(password)
    return "".join(password)


# Example usage (for testing)
if __name__ == "__main__":
    print("=== Password Generator Test ===\n")

    print("Default (16 chars):", generate_password())
    print("Long password (32 chars):", generate_password(length=32))
    print("PIN:", generate_password(
        length=6, include_uppercase=False, include_lowercase=False,
        include_special_chars=False, number_count=6,
    ))
    print("No ambiguous chars:", generate_password(exclude_ambiguous=True))

    passwords = [generate_password(length=8) for _ in range(5)]
    assert len(set(passwords)) == len(passwords)
    print("✓ All passwords are unique!")
