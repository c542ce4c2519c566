"""
Tests for content classification and scam pattern scanning.

Run with: pytest service/tests/test_validators.py -v
"""

import pytest
from cryptoverifier.agents.schemas import ContentCategory
from cryptoverifier.utils.validators import (
    SCAM_PATTERNS,
    classify_content,
    is_token_address,
    is_url,
    scan_for_scam_patterns,
)

ADDRESS = "0x" + "a1B2c3D4e5" * 4


class TestIsUrl:
    def test_https_url(self):
        assert is_url("https://example.com") is True

    def test_url_with_path_and_query(self):
        assert is_url("http://example.com/claim?ref=abc#top") is True

    def test_other_scheme_with_host(self):
        assert is_url("ftp://files.example.com/readme.txt") is True

    def test_bare_domain_is_not_url(self):
        """No scheme, no URL."""
        assert is_url("example.com") is False

    def test_plain_word(self):
        assert is_url("hello") is False

    def test_text_with_colon(self):
        assert is_url("Note: send me ETH") is False

    def test_whitespace_disqualifies(self):
        assert is_url("https://example.com and more") is False

    def test_invalid_port(self):
        assert is_url("https://example.com:99999") is False

    def test_broken_ipv6(self):
        assert is_url("http://[::1") is False

    def test_empty(self):
        assert is_url("") is False


class TestIsTokenAddress:
    def test_mixed_case_address(self):
        assert is_token_address(ADDRESS) is True

    def test_too_short(self):
        assert is_token_address("0x123") is False

    def test_too_long(self):
        assert is_token_address(ADDRESS + "0") is False

    def test_non_hex(self):
        assert is_token_address("0x" + "g" * 40) is False

    def test_missing_prefix(self):
        assert is_token_address("a" * 42) is False

    def test_trailing_newline(self):
        assert is_token_address(ADDRESS + "\n") is False


class TestClassifyContent:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("https://example.com", ContentCategory.URL),
            (ADDRESS, ContentCategory.TOKEN),
            ("hello", ContentCategory.MESSAGE),
            ("0x123", ContentCategory.MESSAGE),
            ("", ContentCategory.MESSAGE),
            ("Claim your airdrop at https://scam.example now!", ContentCategory.MESSAGE),
        ],
    )
    def test_categories(self, text, expected):
        assert classify_content(text) == expected

    def test_deterministic(self):
        text = "visit https://example.com"
        assert {classify_content(text) for _ in range(5)} == {ContentCategory.MESSAGE}


class TestScanForScamPatterns:
    def test_clean_text(self):
        result = scan_for_scam_patterns("Hi all, the community call starts at 5pm.")
        assert result.matched is False
        assert result.descriptions == []

    def test_seed_phrase(self):
        result = scan_for_scam_patterns("Support here: please DM your Seed Phrase to verify")
        assert result.matched is True
        assert result.descriptions == ["Asking for private key or seed phrase"]

    def test_send_to_receive(self):
        result = scan_for_scam_patterns("Send 1 ETH and receive 2 ETH back instantly")
        assert result.descriptions == ["Send X to receive Y scam"]

    def test_multiple_patterns_in_definition_order(self):
        text = (
            "Migrate your token now! Click the link to claim. "
            "Also share your private key so we can upgrade your wallet."
        )
        result = scan_for_scam_patterns(text)
        all_descriptions = [description for _, description in SCAM_PATTERNS]

        assert result.matched is True
        assert set(result.descriptions) <= set(all_descriptions)
        assert result.descriptions == [d for d in all_descriptions if d in result.descriptions]
        assert result.descriptions == [
            "Asking for private key or seed phrase",
            "Link to claim tokens/rewards",
            "Suspicious wallet upgrade request",
            "Token migration scam",
        ]

    def test_word_boundaries(self):
        """'airdrops' does not count as the word 'airdrop'."""
        result = scan_for_scam_patterns("airdrops claim connect")
        assert result.matched is False
