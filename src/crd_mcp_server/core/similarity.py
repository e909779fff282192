"""Edit-distance based string similarity."""

from typing import List


def levenshtein_distance(first: str, second: str) -> int:
    """Compute the Levenshtein distance between two strings.

    Insertions, deletions and substitutions each cost one.

    Args:
        first: First string
        second: Second string

    Returns:
        Minimum number of single-character edits turning one into the other
    """
    if len(first) < len(second):
        first, second = second, first

    previous: List[int] = list(range(len(second) + 1))
    for i, char_a in enumerate(first, start=1):
        current = [i]
        for j, char_b in enumerate(second, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    current[j - 1] + 1,  # insertion
                    previous[j] + 1,  # deletion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Normalized, case-insensitive similarity in [0, 1].

    Args:
        first: First string
        second: Second string

    Returns:
        ``(longest - distance) / longest`` on lowercased inputs; 1.0 when
        both strings are empty
    """
    first = first.lower()
    second = second.lower()
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(first, second)) / longest
