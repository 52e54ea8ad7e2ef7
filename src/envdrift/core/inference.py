"""
Secret classification for .env values.

Decides, for one key/value pair, whether the value may be copied into
.env.example or must be replaced by a placeholder. Rules are applied in a
fixed order and the first one that fires decides:

    ignore list > alwaysScrub list > strict mode > provider signature
    > sensitive key name > keep
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .config import ScrubConfiguration, DEFAULT_PLACEHOLDER_FORMAT
from .signatures import detect_provider_secret


REASON_IGNORED = 'Ignored (in ignore list)'
REASON_ALWAYS_SCRUB = 'Always scrub (in alwaysScrub list)'
REASON_STRICT = 'Strict mode enabled'
REASON_SENSITIVE_KEY = 'Sensitive key name'
REASON_NON_SENSITIVE = 'Non-sensitive key'
REASON_DETECTED = 'Detected {}'

# Substrings of key names that mark a value as sensitive
DEFAULT_SENSITIVE_KEYWORDS = (
    'password',
    'pass',
    'pwd',
    'secret',
    'key',
    'token',
    'auth',
    'api',
    'private',
    'credential',
    'jwt',
    'hash',
    'salt',
    'encrypt',
    'url',
    'uri',
    'connection',
    'dsn',
    'host',
    'port',
    'database',
    'db',
    'redis',
    'mongo',
    'postgres',
    'mysql',
    'smtp',
    'mail',
    'sendgrid',
    'twilio',
    'stripe',
    'aws',
    'gcp',
    'azure',
    'firebase',
    'supabase',
    'clerk',
    'oauth',
    'client_id',
    'client_secret',
    'access',
    'refresh',
    'bearer',
    'webhook',
    'signing',
    'encryption',
)


@dataclass(frozen=True)
class ScrubDecision:
    """Classifier output for one key. The reason doubles as an audit trail."""
    key: str
    original_value: str
    result_value: str
    was_scrubbed: bool
    reason: str
    comment: Optional[str] = None
    preceding_comments: Optional[Tuple[str, ...]] = None


def generate_placeholder(key: str, placeholder_format: str = DEFAULT_PLACEHOLDER_FORMAT) -> str:
    """
    Build the placeholder for a key.

    Args:
        key: Environment variable key
        placeholder_format: Template containing a {KEY} token

    Returns:
        Placeholder string, e.g. YOUR_API_KEY_HERE
    """
    return placeholder_format.replace('{KEY}', key.upper(), 1)


def is_sensitive_key(key: str, custom_keywords: Optional[Iterable[str]] = None) -> bool:
    """
    Check whether a key name suggests a sensitive value.

    Matching is a case-insensitive substring test against the default
    keywords plus any custom ones.
    """
    key_lower = key.lower()
    keywords = DEFAULT_SENSITIVE_KEYWORDS + tuple(custom_keywords or ())
    return any(keyword.lower() in key_lower for keyword in keywords)


def classify(key: str, value: str, config: Optional[ScrubConfiguration] = None) -> ScrubDecision:
    """
    Decide whether a value must be scrubbed.

    Args:
        key: Environment variable key
        value: Raw value from the source file
        config: Scrub configuration (defaults apply when None)

    Returns:
        ScrubDecision with the value to write and the reason
    """
    if config is None:
        config = ScrubConfiguration()

    placeholder = generate_placeholder(key, config.placeholder_format)

    def keep(reason: str) -> ScrubDecision:
        return ScrubDecision(key, value, value or placeholder, False, reason)

    def scrub(reason: str) -> ScrubDecision:
        return ScrubDecision(key, value, placeholder, True, reason)

    if key in config.ignore_keys:
        return keep(REASON_IGNORED)

    if key in config.always_scrub_keys:
        return scrub(REASON_ALWAYS_SCRUB)

    if config.strict_mode:
        return scrub(REASON_STRICT)

    provider = detect_provider_secret(value, config.custom_patterns)
    if provider:
        return scrub(REASON_DETECTED.format(provider))

    if is_sensitive_key(key, config.custom_sensitive_keywords):
        return scrub(REASON_SENSITIVE_KEY)

    return keep(REASON_NON_SENSITIVE)


scrub_value_detailed = classify


def scrub_value(key: str, value: str, config: Optional[ScrubConfiguration] = None) -> str:
    """Return only the value that would be written for this key."""
    return classify(key, value, config).result_value
