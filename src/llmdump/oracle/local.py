"""Cleaners that run locally, without a language model."""

import re

from llmdump.oracle.base import Cleaner


class PassthroughCleaner(Cleaner):
    """Return documents unchanged."""

    async def clean(self, markdown: str) -> str:
        return markdown


class MarkdownCleaner(Cleaner):
    """Deterministic clean-up of crawler Markdown."""

    async def clean(self, markdown: str) -> str:
        return clean_markdown(markdown)


def clean_markdown(markdown: str) -> str:
    """Strip invisible characters, empty links and redundant whitespace."""
    # Remove zero-width spaces, joiners, and BOM
    markdown = re.sub(r"[\u200B\u200C\u200D\uFEFF]", "", markdown)

    # Remove empty/broken markdown links like [](url) or links with only whitespace
    markdown = re.sub(r"\[\s*\]\([^)]+\)", "", markdown)

    # Image links carry no text for an LLM
    markdown = re.sub(r"!\[[^\]]*\]\([^)]+\)", "", markdown)

    # Clean leading whitespace inside link text
    markdown = re.sub(r"\[\s+", "[", markdown)

    # Collapse multiple spaces (but not at start of line for indentation)
    markdown = re.sub(r"([^\n]) {2,}", r"\1 ", markdown)

    markdown = re.sub(r"[ \t]+\n", "\n", markdown)
    markdown = re.sub(r"\n{3,}", "\n\n", markdown)

    # Fix orphaned heading markers
    markdown = re.sub(r"(^|\n)(#{1,6})\s*\n+", r"\1\2 ", markdown)

    return markdown.strip()
