"""
Provider signature table.

Recognizes secrets by the shape of their VALUE, independent of the key name,
so a Stripe key stored under MY_INNOCENT_VAR is still caught. Entries are
checked in table order and the first match wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Pattern


logger = logging.getLogger(__name__)

CUSTOM_PREFIX = "Custom: "


class ProviderSignature(NamedTuple):
    """A named value pattern for a known secret format."""
    name: str
    pattern: Pattern


@dataclass(frozen=True)
class CustomPattern:
    """User-supplied signature; the pattern is compiled at call time."""
    name: str
    pattern: str


def _sig(name: str, pattern: str, flags: int = 0) -> ProviderSignature:
    return ProviderSignature(name, re.compile(pattern, flags))


PROVIDER_SIGNATURES: List[ProviderSignature] = [
    # AWS
    _sig('AWS Access Key ID', r'^AKIA[0-9A-Z]{16}$'),
    _sig('AWS Secret Access Key', r'^[A-Za-z0-9/+=]{40}$'),

    # Stripe
    _sig('Stripe Secret Key', r'^sk_(live|test)_[a-zA-Z0-9]{20,}$'),
    _sig('Stripe Publishable Key', r'^pk_(live|test)_[a-zA-Z0-9]{20,}$'),
    _sig('Stripe Restricted Key', r'^rk_(live|test)_[a-zA-Z0-9]{20,}$'),
    _sig('Stripe Webhook Secret', r'^whsec_[a-zA-Z0-9]{20,}$'),

    # GitHub
    _sig('GitHub Personal Access Token (Classic)', r'^ghp_[a-zA-Z0-9]{36}$'),
    _sig('GitHub OAuth Access Token', r'^gho_[a-zA-Z0-9]{36}$'),
    _sig('GitHub App Token', r'^ghu_[a-zA-Z0-9]{36}$'),
    _sig('GitHub App Installation Token', r'^ghs_[a-zA-Z0-9]{36}$'),
    _sig('GitHub App Refresh Token', r'^ghr_[a-zA-Z0-9]{36}$'),
    _sig('GitHub Fine-grained PAT', r'^github_pat_[a-zA-Z0-9_]+$'),

    # GitLab
    _sig('GitLab Personal Access Token', r'^glpat-[a-zA-Z0-9\-_]{20,}$'),
    _sig('GitLab Pipeline Token', r'^glptt-[a-zA-Z0-9\-_]{20,}$'),

    # Database URLs
    _sig('PostgreSQL Connection String', r'^postgres(ql)?://.+'),
    _sig('MySQL Connection String', r'^mysql://.+'),
    _sig('MongoDB Connection String', r'^mongodb(\+srv)?://.+'),
    _sig('Redis Connection String', r'^rediss?://.+'),
    _sig('SQLite Connection String', r'^sqlite://.+'),

    # Generic tokens
    _sig('Bearer Token', r'^Bearer\s+[a-zA-Z0-9\-_.]+'),
    _sig('JWT Token', r'^eyJ[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+'),
    _sig('Base64 Encoded Secret (long)', r'^[A-Za-z0-9+/]{64,}={0,2}$'),

    # Cloud and messaging
    _sig('Google API Key', r'^AIza[0-9A-Za-z\-_]{35}$'),
    _sig('Google OAuth Client ID', r'^[0-9]+-[a-z0-9]+\.apps\.googleusercontent\.com$'),
    _sig('Slack Token', r'^xox[baprs]-[0-9a-zA-Z\-]{10,}$'),
    _sig('Slack Webhook URL', r'^https://hooks\.slack\.com/services/.+'),
    _sig('Discord Webhook URL', r'^https://(discord|discordapp)\.com/api/webhooks/.+'),
    _sig('Twilio Account SID', r'^AC[a-f0-9]{32}$'),
    _sig('Twilio Auth Token', r'^[a-f0-9]{32}$'),

    # Email services
    _sig('SendGrid API Key', r'^SG\.[a-zA-Z0-9\-_]{22}\.[a-zA-Z0-9\-_]{43}$'),
    _sig('Mailgun API Key', r'^key-[a-f0-9]{32}$'),
    _sig('Mailchimp API Key', r'^[a-f0-9]{32}-us[0-9]{1,2}$'),

    # Package registries and platforms
    _sig('NPM Token', r'^npm_[a-zA-Z0-9]{36}$'),
    _sig('Heroku API Key', r'^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$'),

    # AI providers
    _sig('OpenAI API Key', r'^sk-[a-zA-Z0-9]{48}$'),
    _sig('Anthropic API Key', r'^sk-ant-[a-zA-Z0-9\-_]+$'),

    # Supabase anon keys are HS256 JWTs
    _sig('Supabase Anon Key', r'^eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9\.[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+$'),

    # Clerk
    _sig('Clerk Secret Key', r'^sk_(test|live)_[a-zA-Z0-9]+$'),
    _sig('Clerk Publishable Key', r'^pk_(test|live)_[a-zA-Z0-9]+$'),

    # PEM header only; the body spans lines and never reaches a single value
    _sig('Private Key (PEM)', r'^-----BEGIN (RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----'),

    _sig('Hex Secret (32+ chars)', r'^[a-f0-9]{32,}$', re.IGNORECASE),
]


def _compile_custom(custom: CustomPattern) -> Optional[Pattern]:
    try:
        return re.compile(custom.pattern)
    except re.error as exc:
        logger.debug("Skipping invalid custom pattern %r: %s", custom.name, exc)
        return None


def detect_provider_secret(
    value: str,
    custom_patterns: Optional[Iterable[CustomPattern]] = None
) -> Optional[str]:
    """
    Match a value against known provider secret formats.

    Built-in signatures are checked first, then custom patterns in the order
    given. Custom matches are reported as "Custom: {name}". An invalid custom
    regex is treated as matching nothing.

    Args:
        value: Value to check
        custom_patterns: Optional user-supplied patterns

    Returns:
        Signature name, or None if nothing matched
    """
    for signature in PROVIDER_SIGNATURES:
        if signature.pattern.search(value):
            return signature.name

    for custom in custom_patterns or ():
        regex = _compile_custom(custom)
        if regex is not None and regex.search(value):
            return f"{CUSTOM_PREFIX}{custom.name}"

    return None
