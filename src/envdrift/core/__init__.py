"""
EnvDrift core modules.

Includes:
- lexer: Line-oriented .env parsing with comment attachment
- signatures: Provider secret formats recognized by value
- inference: Secret classification (scrub or keep)
- drift: Key-level drift detection
- syncer: .env.example regeneration and serialization
- diff: Per-key diff between two env files
- config: Scrub configuration and config file loading
- discovery: Env file lookup in a project
"""

from . import lexer
from . import signatures
from . import inference
from . import drift
from . import syncer
from . import diff
from . import config
from . import discovery

from .lexer import EnvEntry, parse_env_content, extract_keys
from .signatures import CustomPattern, PROVIDER_SIGNATURES, detect_provider_secret
from .inference import ScrubDecision, classify, is_sensitive_key, scrub_value
from .drift import DriftResult, detect_drift
from .syncer import ENVDRIFT_SIGNATURE, SyncResult, generate, render
from .diff import DiffLine, DiffResult, compute_diff, compute_changes_only
from .config import ScrubConfiguration, EnvDriftConfig, ConfigError

__all__ = [
    "lexer",
    "signatures",
    "inference",
    "drift",
    "syncer",
    "diff",
    "config",
    "discovery",
    "EnvEntry",
    "parse_env_content",
    "extract_keys",
    "CustomPattern",
    "PROVIDER_SIGNATURES",
    "detect_provider_secret",
    "ScrubDecision",
    "classify",
    "is_sensitive_key",
    "scrub_value",
    "DriftResult",
    "detect_drift",
    "ENVDRIFT_SIGNATURE",
    "SyncResult",
    "generate",
    "render",
    "DiffLine",
    "DiffResult",
    "compute_diff",
    "compute_changes_only",
    "ScrubConfiguration",
    "EnvDriftConfig",
    "ConfigError",
]
