"""
Line-oriented .env file parser.

Turns raw file text into an ordered list of EnvEntry records. Comment lines
are collected and attached to the entry that follows them, so a regenerated
template can carry the same documentation as its source.

The parser is permissive: lines that are not comments, blanks or
KEY=VALUE assignments are skipped rather than reported.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)

KEY_VALUE_RE = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)=(.*)$')
QUOTE_CHARS = ('"', "'")


@dataclass(frozen=True)
class EnvEntry:
    """A single KEY=VALUE assignment in a .env file."""
    key: str
    value: str
    line: int = 0  # 1-based, informational only
    comment: Optional[str] = None  # Inline "# ..." after the value
    preceding_comments: Optional[Tuple[str, ...]] = None

    def __repr__(self):
        return f"EnvEntry({self.key}={self.value!r}, line={self.line})"


def strip_quotes(value: str) -> str:
    """Remove one layer of matching surrounding quotes."""
    if len(value) >= 2 and value[0] in QUOTE_CHARS and value[-1] == value[0]:
        return value[1:-1]
    return value


def split_value(raw_value: str) -> Tuple[str, Optional[str]]:
    """
    Split the right-hand side of an assignment into value and inline comment.

    Args:
        raw_value: Everything after the first '=' on a trimmed line

    Returns:
        Tuple of (value, inline_comment or None)
    """
    if raw_value.startswith(QUOTE_CHARS):
        quote = raw_value[0]
        end_quote = raw_value.find(quote, 1)
        if end_quote > 0:
            after_quote = raw_value[end_quote + 1:].strip()
            comment = after_quote if after_quote.startswith('#') else None
            return raw_value[1:end_quote], comment
        # Unterminated quote: keep the text as written
        return raw_value, None

    comment_index = raw_value.find(' #')
    if comment_index > 0:
        return raw_value[:comment_index].strip(), raw_value[comment_index + 1:].strip()

    return raw_value, None


class Lexer:
    """
    Parser for .env files.

    Keeps a buffer of whole-line comments seen since the last entry. Blank
    lines do not flush the buffer, so a comment block separated from its
    key by blank lines still attaches to that key.
    """

    def __init__(self, content: str, preserve_comments: bool = True):
        self.content = content
        self.preserve_comments = preserve_comments
        self.lines = content.split('\n')
        self._pending_comments: List[str] = []

    def tokenize(self) -> List[EnvEntry]:
        """
        Parse content into entries.

        Returns:
            List of EnvEntry objects in source line order.
        """
        entries = []
        self._pending_comments = []

        for index, line in enumerate(self.lines):
            entry = self._parse_line(line, index + 1)
            if entry is not None:
                entries.append(entry)

        return entries

    def _parse_line(self, line: str, line_no: int) -> Optional[EnvEntry]:
        """Parse a single line, returning an entry for assignments only."""
        stripped = line.strip()

        if not stripped:
            return None

        if stripped.startswith('#'):
            if self.preserve_comments:
                self._pending_comments.append(stripped)
            return None

        match = KEY_VALUE_RE.match(stripped)
        if not match:
            logger.debug("Skipping malformed line %d: %r", line_no, stripped[:40])
            return None

        key, raw_value = match.groups()
        value, inline_comment = split_value(raw_value)

        preceding = None
        if self.preserve_comments and self._pending_comments:
            preceding = tuple(self._pending_comments)
        self._pending_comments = []

        return EnvEntry(
            key=key,
            value=strip_quotes(value),
            line=line_no,
            comment=inline_comment if self.preserve_comments else None,
            preceding_comments=preceding,
        )


def parse(content: str, preserve_comments: bool = True) -> List[EnvEntry]:
    """
    Parse .env file content into entries.

    Args:
        content: String content of a .env file
        preserve_comments: Attach whole-line and inline comments to entries

    Returns:
        List of EnvEntry objects
    """
    return Lexer(content, preserve_comments).tokenize()


parse_env_content = parse


def extract_keys(entries: List[EnvEntry]) -> List[str]:
    """Return entry keys in order, duplicates included."""
    return [entry.key for entry in entries]


def get_keys(entries: List[EnvEntry]) -> dict:
    """
    Map keys to values.

    Later duplicates overwrite earlier ones.

    Args:
        entries: List of EnvEntry objects

    Returns:
        Dictionary of key-value pairs
    """
    return {entry.key: entry.value for entry in entries}
