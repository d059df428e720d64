"""
Markup snippets for the results view.

Text from the user or the provider is escaped before it goes into raw HTML.
"""

import html
from typing import List

from segmentation import CASE_PATTERN, STATUTE_PATTERN, highlight_references, split_paragraphs


def issue_box_html(legal_issue: str) -> str:
    return f'<div class="issue-box">{html.escape(legal_issue)}</div>'


def category_badge_html(category: str) -> str:
    return f'<span class="category-badge">{html.escape(category)}</span>'


def emphasized_paragraphs(title: str, content: str) -> List[str]:
    """
    Markdown paragraphs of an analysis item with citations in bold.

    Items about precedents emphasise case numbers, all others statutes.
    """
    pattern = CASE_PATTERN if "판례" in title else STATUTE_PATTERN
    paragraphs = []
    for paragraph in split_paragraphs(content):
        segments = highlight_references(paragraph, pattern)
        paragraphs.append("".join(f"**{text}**" if is_ref else text for text, is_ref in segments))
    return paragraphs
