"""
Discovery of .env files in a project.

Finds the primary input file plus the conventional per-mode variants
(.env.local, .env.development, ...) used by Next.js, Vite and friends.
"""

from pathlib import Path
from typing import List, Optional


ENV_SPECIFIC_FILES = [
    ".env.local",
    ".env.development",
    ".env.development.local",
    ".env.production",
    ".env.production.local",
    ".env.test",
    ".env.test.local",
]


def resolve_env_files(project_root: str = ".", input_name: str = ".env") -> List[Path]:
    """
    List the env files that exist in project_root.

    Order: the configured input file first, then ENV_SPECIFIC_FILES in
    their listed order. A file is only listed once.

    Args:
        project_root: Project root directory
        input_name: Primary input file, relative to project_root

    Returns:
        List of existing file paths
    """
    root = Path(project_root)
    files: List[Path] = []
    seen = set()

    for name in [input_name, *ENV_SPECIFIC_FILES]:
        path = root / name
        resolved = path.resolve()
        if resolved in seen or not path.is_file():
            continue
        seen.add(resolved)
        files.append(path)

    return files


def read_file_safe(path: Path) -> str:
    """Read a text file, returning "" if it is missing or unreadable."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return ""


def display_path(path: Path, project_root: Optional[str] = None) -> str:
    """
    Get a display name for a file.

    Args:
        path: File path
        project_root: Root to make the path relative to (default: cwd)

    Returns:
        POSIX-style relative path, or the file name if not under the root
    """
    root = Path(project_root) if project_root else Path.cwd()
    try:
        return Path(path).resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return Path(path).name
