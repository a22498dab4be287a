"""
strength.py - Password strength scoring for live UI feedback

The score is a pure function of the password so it can run on every
keystroke and always give the same answer.
"""
import math
import re
from typing import NamedTuple

# (upper bound, label, tier) - the first band whose bound exceeds the score wins
STRENGTH_BANDS = (
    (30, "Weak", "destructive"),
    (60, "Fair", "accent"),
    (80, "Good", "primary"),
)
STRONGEST = ("Strong", "primary")

WEAK_PATTERNS = re.compile(r"123|abc|qwe", re.IGNORECASE)
REPEATED_CHARS = re.compile(r"(.)\1{2,}")


class StrengthResult(NamedTuple):
    score: float  # 0-100
    label: str
    tier: str


def estimate_strength(password: str) -> StrengthResult:
    """
    Score a password from 0 to 100.

    Scoring:
    - Length: 4 points per character, up to 25
    - Variety: +5 lowercase, +5 uppercase, +5 digits, +10 anything else
    - Penalties: -10 for 3+ identical characters in a row, -10 for runs
      like '123', 'abc', 'qwe', -20 when shorter than 8
    - Long passwords: +10 at 16 characters, another +10 at 20
    - Entropy: length * log2(distinct characters) / 4, up to 25
    """
    length = len(password)
    score = min(length * 4, 25)

    if re.search(r"[a-z]", password):
        score += 5
    if re.search(r"[A-Z]", password):
        score += 5
    if re.search(r"\d", password):
        score += 5
    if re.search(r"[^a-zA-Z\d]", password):
        score += 10

    if REPEATED_CHARS.search(password):
        score -= 10
    if WEAK_PATTERNS.search(password):
        score -= 10

    if length >= 16:
        score += 10
    if length >= 20:
        score += 10
    if length < 8:
        score -= 20

    distinct = len(set(password))
    if distinct:
        entropy = length * math.log2(distinct)
        score += min(entropy / 4, 25)

    score = max(0, min(100, score))

    for bound, label, tier in STRENGTH_BANDS:
        if score < bound:
            return StrengthResult(score, label, tier)
    return StrengthResult(score, *STRONGEST)


def format_strength_bar(result: StrengthResult, width: int = 20) -> str:
    """Create a visual strength bar"""
    filled = int((result.score / 100) * width)
    bar = '█' * filled + '░' * (width - filled)

    # Color codes (for terminal)
    colors = {
        "destructive": '\033[91m',  # Red
        "accent": '\033[93m',       # Yellow
        "primary": '\033[92m',      # Green
    }
    reset = '\033[0m'
    return f"{colors[result.tier]}{bar}{reset} {result.score:.0f}% {result.label}"


# Example usage
if __name__ == "__main__":
    for pwd in ["password", "aaaaaaaa", "MyP@ssw0rd", "Tr7!qX9#mZ2$", "correct-horse-battery-staple"]:
        print(f"{pwd:32} {format_strength_bar(estimate_strength(pwd))}")
