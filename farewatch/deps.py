"""
Optional dependency loading.

BeautifulSoup gives the extractors a real HTML tree. It is loaded at most
once per process; when it cannot be imported the caller falls back to the
regex document backend and the result is remembered for the life of the
process.
"""

import logging
import threading

logger = logging.getLogger(__name__)

_NOT_LOADED = object()

# Cache the imported class
_beautifulsoup = _NOT_LOADED
_lock = threading.Lock()


def ensure_beautifulsoup():
    """Try to import BeautifulSoup.

    Returns:
        The bs4.BeautifulSoup class or None if unavailable
    """
    try:
        from bs4 import BeautifulSoup
        return BeautifulSoup
    except ImportError as e:
        logger.warning(
            f"beautifulsoup4 is not available ({e}); HTML will be scanned with regex only. "
            "Install it with: pip install beautifulsoup4"
        )
        return None


def get_beautifulsoup():
    """Get the BeautifulSoup class (cached, loaded on first use).

    Returns:
        The bs4.BeautifulSoup class or None if unavailable
    """
    global _beautifulsoup
    if _beautifulsoup is _NOT_LOADED:
        with _lock:
            if _beautifulsoup is _NOT_LOADED:
                _beautifulsoup = ensure_beautifulsoup()
    return _beautifulsoup
