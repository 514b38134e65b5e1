"""
Structured-document access.

Extractors that need more than plain text (beacon URLs, JSON-LD blocks,
microdata values) go through a DocumentQuery. There are two
implementations:

- TreeDocumentQuery: BeautifulSoup tree (html.parser builder)
- RegexDocumentQuery: plain regex scan over the raw markup

Both return the same values for the same input. The backend is chosen once
per process, on first use, and never changes afterwards unless
configure_backend() is called explicitly (tests, CLI startup).
"""

import logging
import re
import threading
from html import unescape

from .deps import get_beautifulsoup

logger = logging.getLogger(__name__)

BACKEND_AUTO = 'auto'
BACKEND_TREE = 'tree'
BACKEND_REGEX = 'regex'
BACKEND_CHOICES = (BACKEND_AUTO, BACKEND_TREE, BACKEND_REGEX)

RESOURCE_TAGS = ('script', 'img')

_COMMENT_PATTERN = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
_RESOURCE_TAG_PATTERN = re.compile(r"<(?:script|img)\b([^>]*)>", re.IGNORECASE)
_SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b([^>]*)>(.*?)</script\s*>", re.IGNORECASE | re.DOTALL)
_TAG_OPEN_PATTERN = re.compile(r'<([a-zA-Z][\w:-]*)\b([^>]*)>')
# name="value", name='value' or name=value (unquoted, up to whitespace or >)
_ATTR_PATTERN = re.compile(r"""([^\s"'>/=]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""")


def _attributes(attr_text):
    """Attribute dict for one start tag; names lower-cased, values unescaped."""
    attrs = {}
    for name, double, single, bare in _ATTR_PATTERN.findall(attr_text):
        attrs[name.lower()] = unescape(double or single or bare)
    return attrs


class DocumentView:
    """One parsed document. Subclasses implement the queries."""

    def resource_urls(self):
        """src URLs of <script> and <img> elements, in document order."""
        raise NotImplementedError

    def json_ld_blocks(self):
        """Raw text of every application/ld+json script block."""
        raise NotImplementedError

    def itemprop_values(self, prop):
        """Values of microdata elements with itemprop=prop.

        A content attribute wins over element text, as in schema.org
        <meta itemprop=... content=...> markup.
        """
        raise NotImplementedError


class DocumentQuery:
    """Capability interface: open markup into a queryable DocumentView."""

    name = 'base'

    def open(self, html):
        raise NotImplementedError


class _RegexView(DocumentView):

    def __init__(self, html):
        # Commented-out markup is not part of the document tree
        self.html = _COMMENT_PATTERN.sub('', html or '')

    def resource_urls(self):
        urls = []
        for tag in _RESOURCE_TAG_PATTERN.finditer(self.html):
            attrs = _attributes(tag.group(1))
            if 'src' in attrs:
                urls.append(attrs['src'].strip())
        return urls

    def json_ld_blocks(self):
        return [
            m.group(2).strip() for m in _SCRIPT_BLOCK_PATTERN.finditer(self.html)
            if _attributes(m.group(1)).get('type', '').strip().lower() == 'application/ld+json'
        ]

    def itemprop_values(self, prop):
        values = []
        for tag in _TAG_OPEN_PATTERN.finditer(self.html):
            attrs = _attributes(tag.group(2))
            if attrs.get('itemprop') != prop:
                continue
            if 'content' in attrs:
                values.append(attrs['content'].strip())
                continue
            # Leaf element text: everything up to the next tag
            end = self.html.find('<', tag.end())
            text = self.html[tag.end():end if end != -1 else len(self.html)]
            values.append(unescape(text).strip())
        return values


class RegexDocumentQuery(DocumentQuery):
    """Regex-only backend. Always available."""

    name = BACKEND_REGEX

    def open(self, html):
        return _RegexView(html)


class _TreeView(DocumentView):

    def __init__(self, soup):
        self.soup = soup

    def resource_urls(self):
        return [tag['src'].strip() for tag in self.soup.find_all(list(RESOURCE_TAGS), src=True)]

    def json_ld_blocks(self):
        blocks = []
        for script in self.soup.find_all('script'):
            if (script.get('type') or '').strip().lower() != 'application/ld+json':
                continue
            blocks.append((script.string or script.get_text() or '').strip())
        return blocks

    def itemprop_values(self, prop):
        values = []
        for tag in self.soup.find_all(attrs={'itemprop': prop}):
            if tag.has_attr('content'):
                values.append(tag['content'].strip())
            else:
                # Leaf element text: the leading text node, if any
                first = tag.contents[0] if tag.contents else None
                text = str(first) if first is not None and first.name is None else ''
                values.append(text.strip())
        return values


class TreeDocumentQuery(DocumentQuery):
    """BeautifulSoup-backed backend."""

    name = BACKEND_TREE

    def __init__(self, soup_class):
        self.soup_class = soup_class

    def open(self, html):
        return _TreeView(self.soup_class(html or '', 'html.parser'))


# ============================================================================
# PROCESS-WIDE BACKEND
# ============================================================================

_backend = None
_backend_lock = threading.Lock()


def _select_backend(preference):
    if preference == BACKEND_REGEX:
        return RegexDocumentQuery()

    soup_class = get_beautifulsoup()
    if soup_class is not None:
        return TreeDocumentQuery(soup_class)

    if preference == BACKEND_TREE:
        logger.warning("Tree HTML backend requested but beautifulsoup4 is unavailable; using regex backend")
    return RegexDocumentQuery()


def configure_backend(preference=BACKEND_AUTO):
    """Choose the document backend for this process.

    Args:
        preference: 'auto' (tree when available), 'tree' or 'regex'

    Returns:
        The DocumentQuery now in use
    """
    global _backend
    if preference not in BACKEND_CHOICES:
        raise ValueError(f"Unknown html backend {preference!r}; expected one of {BACKEND_CHOICES}")
    with _backend_lock:
        _backend = _select_backend(preference)
        logger.debug(f"Document backend: {_backend.name}")
        return _backend


def get_document_query():
    """The process-wide DocumentQuery, initialized on first use."""
    global _backend
    if _backend is None:
        with _backend_lock:
            if _backend is None:
                _backend = _select_backend(BACKEND_AUTO)
                logger.debug(f"Document backend: {_backend.name}")
    return _backend
