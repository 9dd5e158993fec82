# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from pipeguard.core.enums import FailureCategory


@dataclass(frozen=True)
class ClassificationRule:
    """
    One entry of an ordered classification table.

    The predicate receives lowercased log text and must not raise.
    """
    name: str
    predicate: Callable[[str], bool]
    category: FailureCategory

    def matches(self, logs: str) -> bool:
        return self.predicate(logs)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "category": self.category.value,
        }


def contains_any(*markers: str) -> Callable[[str], bool]:
    """
    Build a predicate matching when any marker occurs in the text.

    Args:
        *markers: Lowercase substrings

    Returns:
        Predicate function
    """
    def predicate(logs: str) -> bool:
        return any(marker in logs for marker in markers)

    return predicate


def contains_all(*markers: str) -> Callable[[str], bool]:
    """
    Build a predicate matching when every marker occurs in the text.

    Args:
        *markers: Lowercase substrings

    Returns:
        Predicate function
    """
    def predicate(logs: str) -> bool:
        return all(marker in logs for marker in markers)

    return predicate


def either(*predicates: Callable[[str], bool]) -> Callable[[str], bool]:
    """ Combine predicates with logical OR. """
    def predicate(logs: str) -> bool:
        return any(p(logs) for p in predicates)

    return predicate


def first_match(
    rules: Sequence[ClassificationRule],
    logs: str,
) -> Optional[ClassificationRule]:
    """
    Find the first rule matching the given text.

    Args:
        rules: Ordered rules
        logs: Lowercased log text

    Returns:
        Matching rule, or None
    """
    for rule in rules:
        if rule.matches(logs):
            return rule
    return None
