"""Shared fixtures for core unit tests"""

import pytest
from markdown_it.tree import SyntaxTreeNode

from mdsite.core.render import make_parser


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text and a [link](https://example.com).

## Heading 2

- item one
- item two

```python
print("hello")
```

| Name | Value |
| ---- | ----- |
| a    | 1     |

Footer paragraph.
"""

SAMPLE_FM_MD = """\
---
title: Test Doc
slug: test-doc
tags: [a, b]
---

# Title

Body content.
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return make_parser("gfm-like")


@pytest.fixture(name="tree")
def tree_fixture(parser):
    """Return a helper that parses markdown into a SyntaxTreeNode."""
    def _tree(text: str) -> SyntaxTreeNode:
        return SyntaxTreeNode(parser.parse(text))
    return _tree


@pytest.fixture(name="sample_tree")
def sample_tree_fixture(tree):
    return tree(SAMPLE_MD)


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD
