"""
Report formatting for Telegram.

Reports from the remote agents mix lightweight Markdown with literal
punctuation. Telegram's MarkdownV2 requires every reserved character to be
escaped unless it is intentional formatting, so formatting is done in two
passes: escape everything, then re-enable the constructs we support by
substitution over the escaped text.
"""

import re

MARKDOWN_V2_RESERVED = re.compile(r'([_*\[\]()~`>#+=|{}.!\-])')

# Applied in order over the escaped text
_UNESCAPE_RULES: list[tuple[re.Pattern, str]] = [
    # Headings -> bold
    (re.compile(r'^\\#\\#\\# (.*)$', re.MULTILINE), r'*\1*'),
    (re.compile(r'^\\#\\# (.*)$', re.MULTILINE), r'*\1*'),
    (re.compile(r'^\\# (.*)$', re.MULTILINE), r'*\1*'),
    # Bold
    (re.compile(r'\\\*\\\*(.*?)\\\*\\\*'), r'*\1*'),
    (re.compile(r'\\_\\_(.*?)\\_\\_'), r'*\1*'),
    # Italic
    (re.compile(r'\\\*(.*?)\\\*'), r'_\1_'),
    (re.compile(r'\\_(.*?)\\_'), r'_\1_'),
    # Lists
    (re.compile(r'^\\-\s+', re.MULTILINE), '• '),
    (re.compile(r'^\d+\\\.\s+', re.MULTILINE), '• '),
    # Links
    (re.compile(r'\\\[(.*?)\\\]\\\((.*?)\\\)'), r'[\1](\2)'),
]

_BLANK_RUN = re.compile(r'\n{3,}')
_HEADING_MARKER = re.compile(r'^#{1,6}\s+', re.MULTILINE)
# Paired constructs only; lone or word-internal * and _ are literal text
_PLAIN_MARKUP = re.compile(
    r'`([^`\n]+)`'
    r'|\*\*(?=\S)(.+?)(?<=\S)\*\*'
    r'|(?<!\w)__(?=\S)(.+?)(?<=\S)__(?!\w)'
    r'|(?<![\w*])\*(?=\S)([^*\n]+?)(?<=\S)\*(?![\w*])'
    r'|(?<!\w)_(?=\S)([^_\n]+?)(?<=\S)_(?!\w)'
)


def escape_markdown_v2(text: str) -> str:
    """Escape every MarkdownV2 reserved character."""
    return "\n".join(MARKDOWN_V2_RESERVED.sub(r'\\\1', line) for line in text.split("\n"))


def to_chat_markup(text: str) -> str:
    """
    Convert a Markdown-ish report to Telegram MarkdownV2.

    Supported: # / ## / ### headings (rendered bold), **bold**, __bold__,
    *italic*, _italic_, "- " and "1. " bullets, [label](url) links.
    Runs of 3+ newlines are collapsed to a single blank line.
    """
    result = escape_markdown_v2(text)
    for pattern, replacement in _UNESCAPE_RULES:
        result = pattern.sub(replacement, result)
    return _BLANK_RUN.sub("\n\n", result)


def _unwrap(match: re.Match) -> str:
    return next(group for group in match.groups() if group is not None)


def to_plain_text(text: str) -> str:
    """
    Drop markup for the plain-text fallback.

    Heading markers go; **bold**, __bold__, *italic*, _italic_ and `code`
    keep their inner text. Identifiers like claim_reward stay intact.
    """
    result = _HEADING_MARKER.sub("", text)
    result = _PLAIN_MARKUP.sub(_unwrap, result)
    return _BLANK_RUN.sub("\n\n", result)
