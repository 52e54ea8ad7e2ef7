"""
Per-key diff between .env and .env.example raw values.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from .lexer import EnvEntry, get_keys


ADDED = 'added'
REMOVED = 'removed'
MODIFIED = 'modified'
UNCHANGED = 'unchanged'


@dataclass(frozen=True)
class DiffLine:
    """One key's status. 'added' means present in .env only."""
    key: str
    kind: str
    env_value: Optional[str] = None
    example_value: Optional[str] = None

    def to_dict(self) -> dict:
        data = {'type': self.kind, 'key': self.key}
        if self.env_value is not None:
            data['envValue'] = self.env_value
        if self.example_value is not None:
            data['exampleValue'] = self.example_value
        return data


@dataclass(frozen=True)
class DiffResult:
    lines: List[DiffLine]
    added: int
    removed: int
    modified: int
    unchanged: int

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


def compute_diff(env_entries: List[EnvEntry], example_entries: List[EnvEntry]) -> DiffResult:
    """
    Classify every key of either file as added, removed, modified or unchanged.

    Args:
        env_entries: Parsed .env entries
        example_entries: Parsed .env.example entries

    Returns:
        DiffResult with one line per key, sorted by key, and counts
    """
    env_map = get_keys(env_entries)
    example_map = get_keys(example_entries)

    lines = []
    for key in sorted(set(env_map) | set(example_map)):
        env_value = env_map.get(key)
        example_value = example_map.get(key)

        if example_value is None:
            kind = ADDED
        elif env_value is None:
            kind = REMOVED
        elif env_value != example_value:
            kind = MODIFIED
        else:
            kind = UNCHANGED

        lines.append(DiffLine(key, kind, env_value, example_value))

    def count(kind: str) -> int:
        return sum(1 for line in lines if line.kind == kind)

    return DiffResult(
        lines=lines,
        added=count(ADDED),
        removed=count(REMOVED),
        modified=count(MODIFIED),
        unchanged=count(UNCHANGED),
    )


def compute_changes_only(env_entries: List[EnvEntry], example_entries: List[EnvEntry]) -> DiffResult:
    """Like compute_diff, without unchanged lines. Counts still cover every key."""
    full = compute_diff(env_entries, example_entries)
    return replace(full, lines=[line for line in full.lines if line.kind != UNCHANGED])
