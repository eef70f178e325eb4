"""Typed errors raised by the ingestion and validation pipeline"""


class MarkdownError(ValueError):
    """Base class for every rejection raised while ingesting a markdown document.

    `limit` names the limit or pattern that triggered the failure so callers can
    report it without echoing the offending payload.
    """
    prefix = "Markdown error"

    def __init__(self, details: str, limit: str | None = None):
        super().__init__(f"{self.prefix}: {details}")
        self.details = details
        self.limit = limit


class ContentTooLargeError(MarkdownError):
    prefix = "Markdown content too large"


class FrontMatterTooLargeError(MarkdownError):
    prefix = "Front matter too large"


class FrontMatterValueTooLargeError(MarkdownError):
    prefix = "Front matter value too large"


class ExcessiveNestingError(MarkdownError):
    prefix = "Excessive nesting detected"


class DangerousContentError(MarkdownError):
    prefix = "Dangerous content detected"


class ExcessiveRepetitionError(MarkdownError):
    prefix = "Excessive repetition detected"


class InvalidFrontMatterError(MarkdownError):
    prefix = "Invalid front matter"


class InvalidEncodingError(MarkdownError):
    prefix = "Invalid encoding"
