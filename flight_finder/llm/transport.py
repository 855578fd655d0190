import asyncio
import httpx
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from flight_finder.errors import TransportError
from flight_finder.llm.sources import citations_from_response


@dataclass
class ModelReply:
    text: str
    citations: List[Dict[str, Optional[str]]] = field(default_factory=list)


class ModelTransport(Protocol):
    """The two request shapes the pipeline needs from a model service."""

    async def search(self, prompt: str) -> ModelReply:
        """Free-text generation with web search enabled."""
        ...

    async def generate_structured(self, prompt: str, schema: Any) -> ModelReply:
        """JSON-only generation constrained by ``schema``."""
        ...


class GeminiTransport:
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash"):
        self.model = model
        self._client = genai.Client(api_key=api_key)

    async def search(self, prompt: str) -> ModelReply:
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        response = await self._generate(prompt, config)
        return ModelReply(text=response.text or "", citations=citations_from_response(response))

    async def generate_structured(self, prompt: str, schema: Any) -> ModelReply:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._generate(prompt, config)
        return ModelReply(text=response.text or "")

    async def _generate(self, prompt: str, config: types.GenerateContentConfig) -> Any:
        try:
            return await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            raise TransportError(f"Gemini API error {e.code}: {e.message}", status=e.code) from e
        except genai_errors.UnknownApiResponseError as e:
            raise TransportError(f"Gemini returned an unreadable response: {e}") from e
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise TransportError(f"Gemini connection error: {type(e).__name__}: {e}") from e
        except Exception as e:
            # aiohttp backend and other SDK internals; every failure must be classified
            raise TransportError(f"Gemini call failed: {type(e).__name__}: {e}") from e
