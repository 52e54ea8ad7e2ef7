"""
Configuration for EnvDrift.

Two layers:
- ScrubConfiguration: the single value passed through the classifier and
  generator.
- EnvDriftConfig: the project configuration loaded from .envdriftrc.json
  (or .envdriftrc / envdrift.config.json), merged with CLI options.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .signatures import CustomPattern


logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_FORMAT = 'YOUR_{KEY}_HERE'

CONFIG_FILE_NAMES = [
    '.envdriftrc.json',
    '.envdriftrc',
    'envdrift.config.json',
]


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ScrubConfiguration:
    """Toggles consumed by the classifier and the template generator."""
    strict_mode: bool = False
    ignore_keys: Tuple[str, ...] = ()
    always_scrub_keys: Tuple[str, ...] = ()
    custom_sensitive_keywords: Tuple[str, ...] = ()
    custom_patterns: Tuple[CustomPattern, ...] = ()
    placeholder_format: str = DEFAULT_PLACEHOLDER_FORMAT
    # Generator-only
    preserve_comments: bool = True
    merge_mode: bool = False
    sort_keys: bool = False
    group_by_prefix: bool = False

    def __post_init__(self):
        for name in ('ignore_keys', 'always_scrub_keys',
                     'custom_sensitive_keywords', 'custom_patterns'):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(frozen=True)
class EnvDriftConfig:
    """Project configuration as stored in the config file."""
    input: str = '.env'
    output: str = '.env.example'
    strict: bool = False
    ci: bool = False
    ignore: Tuple[str, ...] = ()
    always_scrub: Tuple[str, ...] = ()
    sensitive_keywords: Tuple[str, ...] = ()
    custom_patterns: Tuple[CustomPattern, ...] = ()
    preserve_comments: bool = True
    merge: bool = False
    placeholder_format: str = DEFAULT_PLACEHOLDER_FORMAT
    sort: bool = False
    group_by_prefix: bool = False

    def to_scrub_configuration(self) -> ScrubConfiguration:
        return ScrubConfiguration(
            strict_mode=self.strict,
            ignore_keys=self.ignore,
            always_scrub_keys=self.always_scrub,
            custom_sensitive_keywords=self.sensitive_keywords,
            custom_patterns=self.custom_patterns,
            placeholder_format=self.placeholder_format,
            preserve_comments=self.preserve_comments,
            merge_mode=self.merge,
            sort_keys=self.sort,
            group_by_prefix=self.group_by_prefix,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase names of the config file."""
        data = {}
        for file_key, attr in FILE_KEYS.items():
            value = getattr(self, attr)
            if attr == 'custom_patterns':
                value = [{'name': p.name, 'pattern': p.pattern} for p in value]
            elif isinstance(value, tuple):
                value = list(value)
            data[file_key] = value
        return data


DEFAULT_CONFIG = EnvDriftConfig()

# Config file key -> EnvDriftConfig attribute
FILE_KEYS = {
    'input': 'input',
    'output': 'output',
    'strict': 'strict',
    'ci': 'ci',
    'ignore': 'ignore',
    'alwaysScrub': 'always_scrub',
    'sensitiveKeywords': 'sensitive_keywords',
    'customPatterns': 'custom_patterns',
    'preserveComments': 'preserve_comments',
    'merge': 'merge',
    'placeholderFormat': 'placeholder_format',
    'sort': 'sort',
    'groupByPrefix': 'group_by_prefix',
}

_BOOL_KEYS = {'strict', 'ci', 'preserveComments', 'merge', 'sort', 'groupByPrefix'}
_STR_KEYS = {'input', 'output', 'placeholderFormat'}
_LIST_KEYS = {'ignore', 'alwaysScrub', 'sensitiveKeywords'}


def _parse_custom_patterns(raw: Any, source: Path) -> Tuple[CustomPattern, ...]:
    if not isinstance(raw, list):
        raise ConfigError(f"'customPatterns' must be a list in {source}")

    patterns = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get('name'), str) \
                or not isinstance(item.get('pattern'), str):
            raise ConfigError(
                f"Each entry of 'customPatterns' needs string 'name' and 'pattern' in {source}"
            )
        patterns.append(CustomPattern(item['name'], item['pattern']))
    return tuple(patterns)


def config_from_dict(data: Dict[str, Any], source: Path = Path('<config>')) -> EnvDriftConfig:
    """
    Build a config from parsed file data, on top of the defaults.

    Args:
        data: Parsed JSON object
        source: File the data came from, used in error messages

    Returns:
        EnvDriftConfig

    Raises:
        ConfigError: If a known key has a value of the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {source}")

    values = {}
    for file_key, raw in data.items():
        attr = FILE_KEYS.get(file_key)
        if attr is None:
            logger.debug("Ignoring unknown config key %r in %s", file_key, source)
            continue

        if file_key in _BOOL_KEYS and not isinstance(raw, bool):
            raise ConfigError(f"'{file_key}' must be true or false in {source}")
        if file_key in _STR_KEYS and not isinstance(raw, str):
            raise ConfigError(f"'{file_key}' must be a string in {source}")
        if file_key in _LIST_KEYS:
            if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
                raise ConfigError(f"'{file_key}' must be a list of strings in {source}")
            raw = tuple(raw)
        if file_key == 'customPatterns':
            raw = _parse_custom_patterns(raw, source)

        values[attr] = raw

    return replace(DEFAULT_CONFIG, **values)


def find_config_file(start_dir: Optional[str] = None) -> Optional[Path]:
    """
    Find a config file in start_dir or any parent directory.

    Within one directory the names in CONFIG_FILE_NAMES are tried in order.

    Args:
        start_dir: Directory to start from (default: current directory)

    Returns:
        Path to the config file or None
    """
    current = Path(start_dir or os.getcwd()).resolve()

    for directory in [current, *current.parents]:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate

    return None


def load_config_file(config_path: Path) -> EnvDriftConfig:
    """
    Load configuration from a file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        data = json.loads(Path(config_path).read_text(encoding='utf-8'))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to parse config file: {config_path}") from exc

    return config_from_dict(data, Path(config_path))


def load_config(cwd: Optional[str] = None) -> Tuple[EnvDriftConfig, Optional[Path]]:
    """
    Find and load the project configuration.

    Args:
        cwd: Directory to search from (default: current directory)

    Returns:
        Tuple of (config, path of the config file or None)
    """
    config_path = find_config_file(cwd)

    if config_path is None:
        config = DEFAULT_CONFIG
    else:
        logger.debug("Loading config from %s", config_path)
        config = load_config_file(config_path)

    if _env_bool('ENVDRIFT_CI', False):
        config = replace(config, ci=True)

    return config, config_path


def _union(existing: Iterable[str], extra: Iterable[str]) -> Tuple[str, ...]:
    merged: List[str] = []
    for item in [*existing, *extra]:
        if item not in merged:
            merged.append(item)
    return tuple(merged)


def merge_config_with_options(config: EnvDriftConfig, **options: Any) -> EnvDriftConfig:
    """
    Overlay CLI options on a loaded config (CLI takes precedence).

    Scalar options replace config values when they are not None. The
    'ignore' and 'always_scrub' lists are added to the configured ones.

    Args:
        config: Loaded configuration
        **options: EnvDriftConfig attribute names mapped to CLI values

    Returns:
        New EnvDriftConfig
    """
    known = {f.name for f in fields(EnvDriftConfig)}
    updates = {}

    for name, value in options.items():
        if name not in known:
            raise TypeError(f"Unknown config option: {name}")
        if value is None:
            continue
        if name in ('ignore', 'always_scrub'):
            updates[name] = _union(getattr(config, name), value)
        else:
            updates[name] = value

    return replace(config, **updates)


def generate_default_config() -> str:
    """Return the starter config file written by `envdrift init`."""
    starter = replace(DEFAULT_CONFIG, ignore=('NODE_ENV', 'DEBUG'))
    data = starter.to_dict()
    # Keep the starter file short
    for key in ('ci', 'customPatterns', 'placeholderFormat', 'groupByPrefix'):
        data.pop(key)
    return json.dumps(data, indent=2)
