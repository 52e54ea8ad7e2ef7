"""
Regeneration of .env.example from .env with smart scrubbing.

Key features:
- Replace mode (.env is the source of truth) or merge mode (existing
  template keys are kept)
- Optional collation-order sorting and grouping by key prefix
- Comment preservation
- Fixed signature header so other tooling can recognize generated files
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .config import ScrubConfiguration
from .inference import ScrubDecision, classify
from .lexer import EnvEntry, extract_keys


ENVDRIFT_SIGNATURE = (
    "# This file was synced and scrubbed by EnvDrift\n"
    "# https://github.com/sol-21/envdrift"
)
PREFIX_RE = re.compile(r'^([A-Z]+)_')
OTHER_GROUP = '_OTHER'


@dataclass(frozen=True)
class SyncResult:
    """Generated template content and the decisions behind it."""
    content: str
    entries: List[ScrubDecision]
    added: List[str]
    removed: List[str]

    @property
    def scrubbed_count(self) -> int:
        return sum(1 for entry in self.entries if entry.was_scrubbed)


def _char_weight(char: str) -> Tuple[int, str]:
    # Punctuation < digits < letters; letters compare case-blind
    if char.isalpha():
        return 2, char.casefold()
    if char.isdigit():
        return 1, char
    return 0, char


def collation_key(key: str) -> tuple:
    """
    Sort key for env keys that does not depend on the process locale.

    Approximates root Unicode collation: letters compare case-insensitively,
    '_' sorts before digits, and lowercase breaks ties before uppercase.
    So app_name < DB_HOST < DB2_URL < Zeta.
    """
    primary = tuple(_char_weight(char) for char in key)
    case = tuple(0 if char.islower() else 1 for char in key)
    return primary, case, key


def key_prefix(key: str) -> str:
    """Leading upper-case run before the first underscore, or the catch-all group."""
    match = PREFIX_RE.match(key)
    return match.group(1) if match else OTHER_GROUP


def group_by_prefix(decisions: List[ScrubDecision]) -> Dict[str, List[ScrubDecision]]:
    """Bucket decisions by key prefix, keeping their relative order."""
    groups: Dict[str, List[ScrubDecision]] = {}
    for decision in decisions:
        groups.setdefault(key_prefix(decision.key), []).append(decision)
    return groups


def _entry_lines(decision: ScrubDecision) -> List[str]:
    lines = list(decision.preceding_comments or ())
    line = f"{decision.key}={decision.result_value}"
    if decision.comment:
        line += f" {decision.comment}"
    lines.append(line)
    return lines


def render(decisions: List[ScrubDecision], grouped: bool = False) -> str:
    """
    Serialize decisions into .env.example content.

    Args:
        decisions: Decisions in output order
        grouped: Emit prefix groups with "# PREFIX" headings

    Returns:
        File content with the signature header and a trailing newline
    """
    lines = [ENVDRIFT_SIGNATURE, '']

    if grouped:
        groups = group_by_prefix(decisions)
        prefixes = sorted(groups)

        for idx, prefix in enumerate(prefixes):
            lines.append('# Other' if prefix == OTHER_GROUP else f'# {prefix}')
            for decision in groups[prefix]:
                lines.extend(_entry_lines(decision))
            if idx < len(prefixes) - 1:
                lines.append('')
    else:
        for decision in decisions:
            lines.extend(_entry_lines(decision))

    return '\n'.join(lines) + '\n'


def generate(
    source_entries: List[EnvEntry],
    template_entries: List[EnvEntry],
    config: Optional[ScrubConfiguration] = None
) -> SyncResult:
    """
    Regenerate .env.example content from .env entries.

    Args:
        source_entries: Parsed .env entries
        template_entries: Parsed entries of the existing .env.example
        config: Scrub and generator toggles (defaults apply when None)

    Returns:
        SyncResult with content, per-key decisions, added and removed keys
    """
    if config is None:
        config = ScrubConfiguration()

    source_keys = extract_keys(source_entries)
    template_keys = extract_keys(template_entries)
    source_set = set(source_keys)
    template_set = set(template_keys)

    added = [key for key in source_keys if key not in template_set]
    removed = [] if config.merge_mode else [
        key for key in template_keys if key not in source_set
    ]

    if config.merge_mode:
        working = list(template_entries) + [
            entry for entry in source_entries if entry.key not in template_set
        ]
    else:
        working = list(source_entries)

    if config.sort_keys:
        working.sort(key=lambda entry: collation_key(entry.key))

    # Last duplicate wins
    source_values = {entry.key: entry.value for entry in source_entries}

    decisions = []
    for entry in working:
        value = source_values.get(entry.key, entry.value)
        decision = classify(entry.key, value, config)

        if config.preserve_comments:
            decision = replace(
                decision,
                comment=entry.comment,
                preceding_comments=entry.preceding_comments,
            )

        decisions.append(decision)

    return SyncResult(
        content=render(decisions, grouped=config.group_by_prefix),
        entries=decisions,
        added=added,
        removed=removed,
    )


generate_synced_example = generate
