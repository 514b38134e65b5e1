"""
Text normalization - turns an HTML page or pasted email into plain text.

The HTML walker uses Python's native html.parser so normalization works the
same whether or not the optional tree parser is installed.
"""

import logging
import re
from html import unescape
from html.parser import HTMLParser

from .models import NormalizedText

logger = logging.getLogger(__name__)

_WHITESPACE_PATTERN = re.compile(r'\s+')
_LINE_SPLIT_PATTERN = re.compile(r'\r\n|\r|\n')

_SCRIPT_STYLE_PATTERN = re.compile(r'<(script|style|title)\b[^>]*>.*?</\1\s*>', re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r'<[^>]+>')
_BLOCK_TAG_PATTERN = re.compile(
    r'</?(?:br|p|div|tr|li|ul|ol|table|thead|tbody|section|article|header|footer|h[1-6])\b[^>]*>',
    re.IGNORECASE
)


class _TextExtractor(HTMLParser):
    """Extract visible text from HTML, keeping block boundaries as newlines."""

    # Not 'head': an omitted </head> is legal and html.parser never closes it
    SKIP_TAGS = frozenset({'script', 'style', 'title', 'noscript', 'svg', 'template'})
    BLOCK_TAGS = frozenset({
        'br', 'p', 'div', 'tr', 'li', 'ul', 'ol', 'table', 'thead', 'tbody',
        'section', 'article', 'header', 'footer', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    })

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.text_parts = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        tag = tag.lower()
        if tag in self.SKIP_TAGS:
            self.skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_endtag(self, tag):
        tag = tag.lower()
        if tag in self.SKIP_TAGS:
            if self.skip_depth > 0:
                self.skip_depth -= 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_data(self, data):
        if self.skip_depth == 0:
            self.text_parts.append(data)

    def get_text(self):
        # Adjacent inline elements still need a separator
        return ' '.join(self.text_parts)


def collapse_whitespace(text):
    """Collapse runs of whitespace (newlines included) and trim."""
    return _WHITESPACE_PATTERN.sub(' ', text or '').strip()


def _to_normalized(raw_text):
    lines = tuple(
        line for line in (collapse_whitespace(part) for part in _LINE_SPLIT_PATTERN.split(raw_text))
        if line
    )
    return NormalizedText(text=' '.join(lines), lines=lines)


def _regex_strip(html_text):
    """Fallback: drop script/style blocks and tags with plain regex."""
    text = _SCRIPT_STYLE_PATTERN.sub(' ', html_text)
    text = _BLOCK_TAG_PATTERN.sub('\n', text)
    text = _TAG_PATTERN.sub(' ', text)
    return unescape(text)


def html_to_text(html_text):
    """Remove markup and return visible text with line breaks at blocks."""
    if not html_text:
        return ""

    try:
        parser = _TextExtractor()
        parser.feed(html_text)
        parser.close()
        text = parser.get_text()
    except (AssertionError, ValueError) as e:
        logger.debug(f"html.parser failed ({e}), using regex strip")
        return _regex_strip(html_text)

    # Some malformed pages leave the walker inside a skipped block
    if not text.strip() and len(html_text) > 100:
        logger.debug("html.parser returned no text, using regex strip")
        return _regex_strip(html_text)

    return text


def normalize(doc):
    """Produce the plain-text projection of a RawDocument.

    Never fails: a document with no recognizable structure still yields a
    (possibly empty) NormalizedText.
    """
    if doc.is_html:
        raw_text = html_to_text(doc.content)
    else:
        raw_text = doc.content

    normalized = _to_normalized(raw_text)
    logger.debug(
        f"Normalized {doc.kind} document: {len(doc.content)} chars -> "
        f"{len(normalized.text)} chars, {len(normalized.lines)} lines"
    )
    return normalized


def normalize_text(text):
    """Normalize a plain string (no markup handling)."""
    return _to_normalized(text or '')
