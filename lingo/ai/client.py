"""
Generation Client.

Narrow request/response wrapper around the generative AI service.

- generate_text: prompt (+ optional instructions) in, free text out
- generate_structured: prompt in, instance of a Pydantic output type out
- search: prompt in, grounded text plus web citations out

Text and structured calls run through PydanticAI agents on a Google
model; grounded search calls the google-genai SDK directly because the
search tool cannot be combined with schema-constrained output and its
citations live in the raw response's grounding metadata.

Every failure surfaces as GenerationError.

Usage:
    from lingo.ai.client import get_generation_client

    client = get_generation_client()
    result = await client.generate_structured(prompt, TranslationResult)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.exceptions import AgentRunError
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from lingo.core.config import get_app_config, get_settings
from lingo.core.exceptions import GenerationError
from lingo.core.logging import get_logger, log_with_source
from lingo.schemas.news import NewsSource

logger = get_logger(__name__)

OutputT = TypeVar("OutputT", bound=BaseModel)

_SERVICE_ERRORS = (AgentRunError, genai_errors.APIError, httpx.HTTPError, TimeoutError)


@dataclass
class GroundedResponse:
    """Text of a grounded answer and the pages it cites."""

    text: str
    sources: list[NewsSource] = field(default_factory=list)


def dedupe_sources(sources: list[NewsSource]) -> list[NewsSource]:
    """Keep the first source for each URI, preserving order."""
    seen: set[str] = set()
    unique: list[NewsSource] = []
    for source in sources:
        if source.uri in seen:
            continue
        seen.add(source.uri)
        unique.append(source)
    return unique


def extract_sources(response: Any) -> list[NewsSource]:
    """
    Pull web citations out of a google-genai response.

    Only chunks with both a URI and a title are kept; duplicates by URI
    are dropped, first occurrence wins.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None or not web.uri or not web.title:
            continue
        sources.append(NewsSource(title=web.title, uri=web.uri))
    return dedupe_sources(sources)


class GenerationClient:
    """Prompt-in, text-or-JSON-out access to the AI service."""

    def __init__(
        self,
        model: Model | str,
        genai_client: genai.Client | None = None,
        search_model: str = "gemini-2.5-flash",
        timeout: float | None = None,
    ) -> None:
        self.model = model
        self.genai_client = genai_client
        self.search_model = search_model
        self.timeout = timeout

    async def _run(self, agent: Agent, prompt: str, operation: str) -> Any:
        try:
            async with asyncio.timeout(self.timeout):
                result = await agent.run(prompt)
        except _SERVICE_ERRORS as e:
            log_with_source(
                logger,
                "ai",
                "error",
                "Generation failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GenerationError(f"AI generation failed: {operation}") from e
        return result.output

    async def generate_text(self, prompt: str, *, instructions: str | None = None) -> str:
        """
        Generate free text.

        Returns:
            The model's text, possibly empty
        """
        agent = Agent(self.model, instructions=instructions)
        output = await self._run(agent, prompt, "generate_text")
        return output or ""

    async def generate_structured(
        self,
        prompt: str,
        output_type: type[OutputT],
        *,
        instructions: str | None = None,
    ) -> OutputT:
        """
        Generate output conforming to a Pydantic model.

        Raises:
            GenerationError: If the service fails or never produces valid output
        """
        agent = Agent(self.model, output_type=output_type, instructions=instructions)
        output = await self._run(agent, prompt, f"generate_{output_type.__name__}")
        if output is None:
            raise GenerationError("No response from AI")
        return output

    async def search(self, prompt: str) -> GroundedResponse:
        """
        Generate a web-grounded answer.

        Raises:
            GenerationError: If the service fails or no SDK client is configured
        """
        if self.genai_client is None:
            raise GenerationError("Grounded search is not configured")

        config = genai_types.GenerateContentConfig(
            tools=[genai_types.Tool(google_search=genai_types.GoogleSearch())],
        )
        try:
            async with asyncio.timeout(self.timeout):
                response = await self.genai_client.aio.models.generate_content(
                    model=self.search_model,
                    contents=prompt,
                    config=config,
                )
        except _SERVICE_ERRORS as e:
            log_with_source(
                logger,
                "ai",
                "error",
                "Grounded search failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GenerationError("AI grounded search failed") from e

        sources = extract_sources(response)
        log_with_source(logger, "ai", "debug", "Grounded search done", sources=len(sources))
        return GroundedResponse(text=response.text or "", sources=sources)


_client: GenerationClient | None = None


def get_generation_client() -> GenerationClient:
    """Lazy initialization: only creates the client when first called."""
    global _client
    if _client is not None:
        return _client

    config = get_app_config()
    genai_client = genai.Client(api_key=get_settings().gemini_api_key)
    model = GoogleModel(config.ai.model, provider=GoogleProvider(client=genai_client))

    _client = GenerationClient(
        model,
        genai_client=genai_client,
        search_model=config.ai.search_model,
        timeout=config.application.timeouts.ai,
    )
    return _client
