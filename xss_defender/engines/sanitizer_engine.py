"""HTML Sanitization Engine for XSS Protection.

This module wraps the `bleach` library to provide the three primitives the
defender is built on:

1.  **clean**: strips every tag, attribute and URL scheme outside a small
    "basic" allowlist. Disallowed tags are removed, not escaped.
2.  **escape**: entity-encodes the five HTML-significant characters.
3.  **is_clean**: reports whether `clean` would leave the text untouched.

All three are pure and never raise on malformed markup.
"""

import re

import bleach

# Inline formatting, links, quotes, lists and simple block tags
BASIC_TAGS = frozenset([
    "a", "b", "blockquote", "br", "cite", "code", "dd", "dl", "dt", "em",
    "i", "li", "ol", "p", "pre", "q", "small", "span", "strike", "strong",
    "sub", "sup", "u", "ul",
])

BASIC_ATTRIBUTES = {
    "a": ["href"],
    "blockquote": ["cite"],
    "q": ["cite"],
}

BASIC_PROTOCOLS = frozenset(["ftp", "http", "https", "mailto"])

# bleach keeps the text of stripped tags, so script/style bodies go first.
# An unterminated element swallows the rest of the input, as a browser would.
_RAWTEXT_ELEMENT = re.compile(
    r"<(script|style)\b[^>]*>.*?(?:</\1\s*>|\Z)",
    re.IGNORECASE | re.DOTALL,
)

_ESCAPE_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})


class SanitizerEngine:
    """A configured HTML cleaner enforcing the basic allowlist."""

    def __init__(self):
        """Initializes the allowed HTML tags, attributes and protocols.

        Current Allowlist:
            - Tags: see `BASIC_TAGS` (inline formatting, links, lists, quotes)
            - Attributes: `href` on <a>, `cite` on <blockquote> and <q>
            - Protocols: ftp, http, https, mailto
        """
        self.allowed_tags = BASIC_TAGS
        self.allowed_attrs = BASIC_ATTRIBUTES
        self.allowed_protocols = BASIC_PROTOCOLS

    def clean(self, text: str) -> str:
        """Removes everything outside the allowlist from `text`.

        Script and style elements are dropped together with their content.
        Other disallowed tags are unwrapped, keeping their text. Stray `<`,
        `>` and `&` in text are entity-encoded, so the result can be longer
        than the input.

        Args:
            text (str): Untrusted input, possibly malformed HTML.

        Returns:
            str: The sanitized markup. Cleaning it again yields the same string.
        """
        if not text:
            return ""

        # Removing one element can splice a new one together ("<scr<script></script>ipt>")
        previous = None
        while previous != text:
            previous = text
            text = _RAWTEXT_ELEMENT.sub("", text)

        # bleach.clean builds a fresh parser per call; a shared Cleaner is not thread-safe
        return bleach.clean(
            text,
            tags=self.allowed_tags,
            attributes=self.allowed_attrs,
            protocols=self.allowed_protocols,
            strip=True,
            strip_comments=True,
        )

    def escape(self, text: str) -> str:
        """Entity-encodes `&`, `<`, `>`, `"` and `'`.

        Not idempotent: an existing `&amp;` becomes `&amp;amp;`.
        """
        if not text:
            return ""
        return text.translate(_ESCAPE_TABLE)

    def is_clean(self, text: str) -> bool:
        """Returns True if `clean(text)` would return `text` unchanged."""
        return self.clean(text) == text


sanitizer_engine = SanitizerEngine()
