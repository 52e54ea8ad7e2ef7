"""
Key-level drift detection between .env and .env.example.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DriftResult:
    """Keys present on only one side, plus both full key lists."""
    is_synced: bool
    missing_in_example: List[str]
    missing_in_template: List[str]
    env_keys: List[str]
    example_keys: List[str]


def detect_drift(source_keys: List[str], template_keys: List[str]) -> DriftResult:
    """
    Compare the keys of a source .env file with its template.

    Duplicates count as set members for the comparison but are kept as-is
    in env_keys / example_keys.

    Args:
        source_keys: Keys from .env, in file order
        template_keys: Keys from .env.example, in file order

    Returns:
        DriftResult; is_synced is True when neither side has extra keys
    """
    source_set = set(source_keys)
    template_set = set(template_keys)

    missing_in_example = [key for key in source_keys if key not in template_set]
    missing_in_template = [key for key in template_keys if key not in source_set]

    return DriftResult(
        is_synced=not missing_in_example and not missing_in_template,
        missing_in_example=missing_in_example,
        missing_in_template=missing_in_template,
        env_keys=list(source_keys),
        example_keys=list(template_keys),
    )
