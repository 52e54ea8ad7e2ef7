"""
EnvDrift - Sync .env files without leaking secrets

Keeps .env.example in step with your local .env, replacing anything that
looks like a secret with a placeholder.
"""

__version__ = "1.1.0"

from .core import lexer, inference, syncer, drift, diff, config

__all__ = [
    "lexer",
    "inference",
    "syncer",
    "drift",
    "diff",
    "config",
]
