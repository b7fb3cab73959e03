"""
Value sanitizers for schema fields.

Every sanitizer is a pure function that is idempotent: applying it to its own
output returns the same value. Markup handling is done with BeautifulSoup's
``html.parser`` so no native parser is required.
"""

import html
import logging
import re
import warnings
from typing import Dict, FrozenSet
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

# URL-ish strings are routinely passed through the text sanitizers
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

_WHITESPACE_RE = re.compile(r"\s+")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")

# Elements removed together with their content
DROPPED_ELEMENTS: FrozenSet[str] = frozenset({
    "script", "style", "iframe", "object", "embed", "form", "input", "button",
    "textarea", "select", "noscript", "template",
})

# Inline/post markup kept by kses_post, with allowed attributes per tag
ALLOWED_POST_TAGS: Dict[str, FrozenSet[str]] = {
    "a": frozenset({"href", "title", "rel", "target"}),
    "abbr": frozenset({"title"}),
    "b": frozenset(),
    "blockquote": frozenset({"cite"}),
    "br": frozenset(),
    "cite": frozenset(),
    "code": frozenset(),
    "del": frozenset({"datetime"}),
    "em": frozenset(),
    "i": frozenset(),
    "li": frozenset(),
    "ol": frozenset(),
    "p": frozenset(),
    "span": frozenset({"title"}),
    "strong": frozenset(),
    "ul": frozenset(),
}

# Non-text nodes never stored, in either sanitizer
NON_TEXT_NODES = (Comment, CData, ProcessingInstruction, Declaration, Doctype)

ALLOWED_URL_SCHEMES: FrozenSet[str] = frozenset({
    "http", "https", "ftp", "ftps", "mailto", "news", "irc", "gopher", "nntp",
    "feed", "telnet", "mms", "rtsp", "sms", "svn", "tel", "fax", "xmpp",
    "webcal", "urn",
})


def _parse(value: str) -> BeautifulSoup:
    """Parse and drop dangerous elements and non-text nodes."""
    soup = BeautifulSoup(value, "html.parser")
    for element in soup.find_all(list(DROPPED_ELEMENTS)):
        element.decompose()
    for node in list(soup.descendants):
        if isinstance(node, NON_TEXT_NODES):
            node.extract()
    return soup


def sanitize_text_field(value: str) -> str:
    """Strip all markup, collapse whitespace and escape ``& < >``."""
    if not value:
        return ""
    soup = _parse(value)
    text = _WHITESPACE_RE.sub(" ", soup.get_text()).strip()
    return html.escape(text, quote=False)


def esc_url_raw(value: str) -> str:
    """Return a storable URL or ``""`` when the scheme is not allowed."""
    if not value:
        return ""
    url = _CONTROL_CHARS_RE.sub("", value.strip()).replace(" ", "%20")
    if not url:
        return ""
    scheme = urlsplit(url).scheme.lower()
    if scheme and scheme not in ALLOWED_URL_SCHEMES:
        logger.debug(f"Rejected URL with scheme '{scheme}'")
        return ""
    return url


def kses_post(value: str) -> str:
    """Keep post-safe markup only.

    Dangerous elements are removed with their content, as are comments,
    doctypes, CDATA and processing instructions. Unknown tags are
    unwrapped, attributes outside the allow-list are dropped and links with
    disallowed schemes lose their ``href``.
    """
    if not value:
        return ""
    soup = _parse(value)

    for tag in soup.find_all(True):
        allowed_attrs = ALLOWED_POST_TAGS.get(tag.name)
        if allowed_attrs is None:
            tag.unwrap()
            continue
        for attr in list(tag.attrs):
            if attr not in allowed_attrs:
                del tag[attr]
        if tag.name == "a" and tag.has_attr("href"):
            href = tag["href"]
            if isinstance(href, list):
                href = " ".join(href)
            cleaned = esc_url_raw(href)
            if cleaned:
                tag["href"] = cleaned
            else:
                del tag["href"]

    return str(soup).strip()
