"""Text-generation oracles: classification, naming and cleanup."""

from llmdump.oracle.base import Classifier, Cleaner, IdentifierGenerator, Oracle, OracleError
from llmdump.oracle.local import MarkdownCleaner, PassthroughCleaner
from llmdump.oracle.openai_oracle import OpenAIOracle

__all__ = [
    "Classifier",
    "Cleaner",
    "IdentifierGenerator",
    "Oracle",
    "OracleError",
    "MarkdownCleaner",
    "PassthroughCleaner",
    "OpenAIOracle",
]
