"""Slug generation for document identifiers and heading anchors"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def heading_id(text: str) -> str:
    """Naive anchor id: lowercased, spaces to hyphens, punctuation kept, duplicates not disambiguated."""
    return text.lower().replace(' ', '-')
