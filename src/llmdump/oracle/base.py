"""Interfaces for the text-generation oracles the core depends on."""

from abc import ABC, abstractmethod

from llmdump.models import CategorySet, CrawledDocument, Identifier


class OracleError(RuntimeError):
    """The oracle replied with something that does not fit the expected schema."""


class Classifier(ABC):
    """Groups documents into named categories."""

    @abstractmethod
    async def classify(self, sites: list[CrawledDocument]) -> CategorySet:
        """Return categories referencing the URLs of ``sites``.

        Only ``url``, ``title`` and ``description`` are meaningful input.
        Nothing guarantees every URL is covered or that no foreign URL appears.
        """
        ...


class IdentifierGenerator(ABC):
    """Names a collection of documents with a short slug."""

    @abstractmethod
    async def generate_identifier(self, sites: list[CrawledDocument]) -> Identifier:
        ...


class Cleaner(ABC):
    """Rewrites a Markdown body without extraneous markup."""

    @abstractmethod
    async def clean(self, markdown: str) -> str:
        ...


class Oracle(Classifier, IdentifierGenerator, Cleaner):
    """Anything that can classify, name and clean documents."""


def format_sites(sites: list[CrawledDocument]) -> str:
    """Render sites one per line as ``url - title - description``."""
    return "\n".join(f"{s.url} - {s.title} - {s.description}" for s in sites)


