"""Oracle backed by an OpenAI-compatible chat completions API."""

import logging

from openai import AsyncOpenAI
from pydantic import ValidationError

from llmdump.config import OracleConfig
from llmdump.models import CategorySet, CrawledDocument, Identifier
from llmdump.oracle.base import Oracle, OracleError, format_sites

logger = logging.getLogger(__name__)

CATEGORIZE_PROMPT = """Group the following links into semantic categories:
{sites}

Categories should reflect the content of the links.
The content of every link in a category will be concatenated into one document.

Respond with ONLY a JSON object of this shape:
{{"categories": [{{"category": "Category name", "refUrls": ["https://..."]}}]}}"""

IDENTIFIER_PROMPT = """Provide a short, memorable identifier for the following links:
{sites}

Use lowercase words joined by hyphens, for example "tanstack-router-react-docs".

Respond with ONLY a JSON object of this shape:
{{"identifier": "..."}}"""

CLEANUP_PROMPT = """Clean the following document. Remove extraneous markup, navigation and links.
Keep only content relevant to the topic such as explanations and code examples.

Return the cleaned content as a Markdown document without any other text.

<content>
{content}
</content>"""


class OpenAIOracle(Oracle):
    """Classify, name and clean documents with a chat model."""

    def __init__(self, config: OracleConfig, client: AsyncOpenAI | None = None):
        self.config = config
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Initialize the API client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                max_retries=self.config.max_retries,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the API client if this oracle created it."""
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None

    async def classify(self, sites: list[CrawledDocument]) -> CategorySet:
        reply = await self._complete(
            CATEGORIZE_PROMPT.format(sites=format_sites(sites)), json_mode=True
        )
        try:
            categories = CategorySet.model_validate_json(reply)
        except ValidationError as e:
            raise OracleError(f"Unexpected categorization reply: {e}") from e
        logger.debug(
            "Oracle proposed %d categories for %d sites", len(categories.categories), len(sites)
        )
        return categories

    async def generate_identifier(self, sites: list[CrawledDocument]) -> Identifier:
        reply = await self._complete(
            IDENTIFIER_PROMPT.format(sites=format_sites(sites)), json_mode=True
        )
        try:
            identifier = Identifier.model_validate_json(reply)
        except ValidationError as e:
            raise OracleError(f"Unexpected identifier reply: {e}") from e
        if not identifier.identifier.strip():
            raise OracleError("Oracle returned an empty identifier")
        return identifier

    async def clean(self, markdown: str) -> str:
        return await self._complete(CLEANUP_PROMPT.format(content=markdown))

    async def _complete(self, prompt: str, json_mode: bool = False) -> str:
        if self._client is None:
            raise RuntimeError("Oracle not initialized. Use 'async with' context manager.")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            **kwargs,
        )
        content = response.choices[0].message.content
        if content is None:
            raise OracleError("Oracle returned no content")
        return content.strip()
