"""Crawl documentation sites, categorize pages and export LLM-ready Markdown."""

__version__ = "1.1.1"
