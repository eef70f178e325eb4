"""Whitelist HTML sanitizer built on an event tokenizer"""

import html
import re
from html.parser import HTMLParser
from urllib.parse import urlsplit

import structlog


logger = structlog.get_logger(__name__)

ALLOWED_TAGS = frozenset({
    "p", "br", "hr", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "dl", "dt", "dd",
    "a", "em", "strong", "i", "b", "u", "s", "strike", "code", "pre",
    "blockquote", "cite", "q",
    "table", "thead", "tbody", "tr", "td", "th",
    "img", "figure", "figcaption", "caption",
    "div", "span", "article", "section", "nav", "aside", "header", "footer", "main", "address",
})
ALLOWED_ATTRIBUTES = {
    "a":          frozenset({"href", "title", "rel", "target"}),
    "img":        frozenset({"src", "alt", "width", "height", "title"}),
    "blockquote": frozenset({"cite"}),
    "q":          frozenset({"cite"}),
    "td":         frozenset({"colspan", "rowspan"}),
    "th":         frozenset({"colspan", "rowspan", "scope"}),
    "code":       frozenset({"class"}),
}
URL_ATTRIBUTES = frozenset({"href", "src", "cite"})
VOID_TAGS = frozenset({"br", "hr", "img"})
# dropped together with everything inside them
CONTENT_DROPPING_TAGS = frozenset({"script", "style"})
# dropped markup, text kept; not in ALLOWED_TAGS, listed for logging
DANGEROUS_TAGS = frozenset({
    "iframe", "embed", "object", "link", "meta", "svg", "math",
    "form", "input", "button", "select", "textarea",
})

ALLOWED_SCHEMES = frozenset({"http", "https", "mailto", "ftp", "ftps"})
BLOCKED_SCHEMES = ("javascript:", "vbscript:", "data:", "file:")
BLOCKED_URL = "#"

_CODE_CLASS_RE = re.compile(r"^language-[\w+#.-]+$")
_URL_NOISE_RE = re.compile(r"[\x00-\x20]+")
_SWEEPS = (
    (re.compile(r"\s*\bon\w+\s*=\s*(?:\"[^\"]*\"|'[^']*')", re.IGNORECASE), ""),
    (re.compile(r"javascript\s*:", re.IGNORECASE), "blocked:"),
    (re.compile(r"data\s*:\s*[^,]*script[^,]*,", re.IGNORECASE), "data:text/plain,blocked"),
)


def _sweep(value: str) -> str:
    """Apply the residual handler/scheme rewrites until nothing changes."""
    while True:
        swept = value
        for pattern, replacement in _SWEEPS:
            swept = pattern.sub(replacement, swept)
        if swept == value:
            return value
        value = swept


def sanitize_url(value: str) -> str:
    """Return value if it is a relative URL or uses an allowed scheme, else '#'.

    The scheme test runs on an entity-decoded copy with control and whitespace
    characters removed, so `&#106;avascript:` and `java\\tscript:` are caught.
    """
    decoded = html.unescape(value.strip())
    compact = _URL_NOISE_RE.sub("", decoded).lower()
    if compact.startswith(BLOCKED_SCHEMES):
        return BLOCKED_URL
    if decoded.startswith(("/", "#", "?")):
        return value
    try:
        scheme = urlsplit(compact).scheme
    except ValueError:
        return BLOCKED_URL
    if scheme and scheme not in ALLOWED_SCHEMES:
        return BLOCKED_URL
    return value


class HtmlSanitizer(HTMLParser):
    """Re-emit only whitelisted tags and attributes from an HTML fragment.

    Text runs are buffered and flushed only when markup is written, so text
    around a dropped tag is swept as one run. Use `sanitize_html` rather than
    driving the parser directly.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._out: list[str] = []
        self._text: list[str] = []
        self._skipping: str | None = None
        self.dropped: list[str] = []

    def _flush_text(self) -> None:
        if self._text:
            self._out.append(html.escape(_sweep("".join(self._text)), quote=False))
            self._text = []

    def _emit(self, markup: str) -> None:
        self._flush_text()
        self._out.append(markup)

    def _render_attrs(self, tag: str, attrs: list[tuple[str, str | None]]) -> str:
        allowed = ALLOWED_ATTRIBUTES.get(tag, frozenset())
        seen = set()
        parts = []
        for name, value in attrs:
            if name not in allowed or name in seen:
                continue
            seen.add(name)
            value = _sweep(value or "")
            if name in URL_ATTRIBUTES:
                value = sanitize_url(value)
            elif tag == "code" and not _CODE_CLASS_RE.match(value):
                continue
            parts.append(f' {name}="{html.escape(value, quote=True)}"')
        return "".join(parts)

    def handle_starttag(self, tag, attrs):
        if self._skipping:
            return
        if tag in CONTENT_DROPPING_TAGS:
            self._skipping = tag
            self.dropped.append(tag)
            return
        if tag not in ALLOWED_TAGS:
            self.dropped.append(tag)
            return
        closing = " /" if tag in VOID_TAGS else ""
        self._emit(f"<{tag}{self._render_attrs(tag, attrs)}{closing}>")

    def handle_endtag(self, tag):
        if self._skipping:
            if tag == self._skipping:
                self._skipping = None
            return
        if tag in VOID_TAGS or tag not in ALLOWED_TAGS:
            return
        self._emit(f"</{tag}>")

    def handle_data(self, data):
        if not self._skipping:
            self._text.append(data)

    # comments, doctypes, processing instructions and CDATA sections are dropped
    def handle_comment(self, data):
        pass

    def handle_decl(self, decl):
        pass

    def handle_pi(self, data):
        pass

    def unknown_decl(self, data):
        pass

    def result(self) -> str:
        self._flush_text()
        return "".join(self._out)


def sanitize_html(markup: str) -> str:
    """Sanitize an HTML fragment; the result is a fixpoint of this function."""
    sanitizer = HtmlSanitizer()
    sanitizer.feed(markup)
    sanitizer.close()
    dangerous = sorted(DANGEROUS_TAGS.intersection(sanitizer.dropped) | CONTENT_DROPPING_TAGS.intersection(sanitizer.dropped))
    if dangerous:
        logger.info("html_tags_dropped", tags=dangerous, count=len(sanitizer.dropped))
    return sanitizer.result()
