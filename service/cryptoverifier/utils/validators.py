"""
Input validators: content classification and scam phrase scanning.

Pure functions over strings, no side effects.
"""

import re
from urllib.parse import urlparse

from cryptoverifier.agents.schemas import ContentCategory, ScanResult

TOKEN_ADDRESS_RE = re.compile(r'0x[a-f0-9]{40}', re.IGNORECASE)
SCHEME_RE = re.compile(r'[a-z][a-z0-9+.\-]*', re.IGNORECASE)

# Ordered: results are reported in this order
SCAM_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r'send.*\d+\s*(eth|btc|usdt).*receive.*\d+\s*(eth|btc|usdt)', re.IGNORECASE),
     "Send X to receive Y scam"),
    (re.compile(r'private key|recovery phrase|seed phrase', re.IGNORECASE),
     "Asking for private key or seed phrase"),
    (re.compile(r'(click|visit|check).*link.*to claim', re.IGNORECASE),
     "Link to claim tokens/rewards"),
    (re.compile(r'\bwhitelist\b.*\bopportunity\b', re.IGNORECASE),
     "Suspicious whitelist opportunity"),
    (re.compile(r'\bupgrade\b.*\bwallet\b', re.IGNORECASE),
     "Suspicious wallet upgrade request"),
    (re.compile(r'\bairdrop\b.*\bclaim\b.*\bconnect\b', re.IGNORECASE),
     "Suspicious airdrop claim"),
    (re.compile(r'\bvalidate\b.*\bwallet\b', re.IGNORECASE),
     "Wallet validation scam"),
    (re.compile(r'\bmigrate\b.*\btoken\b', re.IGNORECASE),
     "Token migration scam"),
]


def is_url(text: str) -> bool:
    """
    Check if text is a well-formed URL.

    Requires a scheme and a network location ("https://example.com",
    "ftp://host/file"). Bare domains, "hello", and anything with
    whitespace are not URLs.
    """
    if not text or any(ch.isspace() for ch in text):
        return False

    try:
        parsed = urlparse(text)
        # Accessing .port validates it and raises on garbage
        parsed.port
    except ValueError:
        return False

    if not parsed.scheme or not SCHEME_RE.fullmatch(parsed.scheme):
        return False

    return bool(parsed.hostname)


def is_token_address(text: str) -> bool:
    """Check if text is an EVM contract address (0x + 40 hex chars)."""
    return bool(text) and TOKEN_ADDRESS_RE.fullmatch(text) is not None


def classify_content(text: str) -> ContentCategory:
    """URL first, token address second, message otherwise."""
    if is_url(text):
        return ContentCategory.URL
    if is_token_address(text):
        return ContentCategory.TOKEN
    return ContentCategory.MESSAGE


def scan_for_scam_patterns(text: str) -> ScanResult:
    """
    Check text against the known scam phrasing patterns.

    Advisory only: used for an early warning before the full analysis.
    """
    descriptions = [
        description
        for pattern, description in SCAM_PATTERNS
        if pattern.search(text or "")
    ]
    return ScanResult(matched=bool(descriptions), descriptions=descriptions)
