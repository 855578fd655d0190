"""
Flight finder gateway

Owns the model-service credential and runs the two supported operations:
web-grounded flight search and schema-constrained itinerary generation.
Each call is a single request/response with no retry; it ends in a result or
exactly one FlightFinderError.
"""

import time
from typing import Callable, Optional

from flight_finder.config import Settings
from flight_finder.errors import (
    MISSING_CREDENTIAL_MESSAGE,
    ConfigurationError,
    FlightFinderError,
    Operation,
    TransportError,
    classify_transport_failure,
)
from flight_finder.llm.extract import parse_flights, parse_itinerary
from flight_finder.llm.prompts import build_itinerary_prompt, build_search_prompt
from flight_finder.llm.schemas import ITINERARY_SCHEMA
from flight_finder.llm.sources import dedupe_sources
from flight_finder.llm.transport import GeminiTransport, ModelReply, ModelTransport
from flight_finder.obs.context import operation_var
from flight_finder.obs.logger import log_event
from flight_finder.obs.metrics import inc_counter, record_timing
from flight_finder.types import Itinerary, SearchResult

TransportFactory = Callable[[str, str], ModelTransport]


class FlightFinderGateway:
    """Entry point for callers: ``find_flights`` and ``generate_itinerary``."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        currency: str = "INR",
        min_options: int = 5,
        transport_factory: TransportFactory = GeminiTransport,
    ):
        self.api_key = api_key.strip() if api_key else None
        self.model = model
        self.currency = currency
        self.min_options = min_options
        self._transport_factory = transport_factory
        self._transport: Optional[ModelTransport] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_transport(self) -> ModelTransport:
        if not self.api_key:
            raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE, detail="GEMINI_API_KEY is not set")
        if self._transport is None:
            self._transport = self._transport_factory(self.api_key, self.model)
        return self._transport

    async def find_flights(self, query: str) -> SearchResult:
        """Ask the model for flights matching ``query`` using web search.

        Raises ConfigurationError, ServiceUnavailable or MalformedResponse.
        """
        token = operation_var.set("search")
        start = time.monotonic()
        try:
            try:
                transport = self._get_transport()
                prompt = build_search_prompt(query, currency=self.currency, min_options=self.min_options)
                reply = await self._call(transport.search(prompt), "search")
                flights = parse_flights(reply.text)
                sources = dedupe_sources(reply.citations)
            except FlightFinderError as e:
                self._record_failure("search", e, start, query=query)
                raise

            self._record_success("search", start, flights=len(flights), sources=len(sources))
            return SearchResult(flights=flights, sources=sources)
        finally:
            operation_var.reset(token)

    async def generate_itinerary(self, destination: str) -> Itinerary:
        token = operation_var.set("itinerary")
        start = time.monotonic()
        try:
            try:
                transport = self._get_transport()
                prompt = build_itinerary_prompt(destination)
                reply = await self._call(
                    transport.generate_structured(prompt, ITINERARY_SCHEMA),
                    "itinerary",
                    subject=destination,
                )
                itinerary = parse_itinerary(reply.text)
            except FlightFinderError as e:
                self._record_failure("itinerary", e, start, destination=destination)
                raise

            self._record_success("itinerary", start, days=len(itinerary.days))
            return itinerary
        finally:
            operation_var.reset(token)

    async def _call(self, pending, operation: Operation, subject: Optional[str] = None) -> ModelReply:
        try:
            return await pending
        except TransportError as e:
            raise classify_transport_failure(e, operation, subject) from e

    def _record_success(self, operation: Operation, start: float, **fields) -> None:
        elapsed_ms = (time.monotonic() - start) * 1000.0
        record_timing("llm_latency_ms", elapsed_ms, {"operation": operation})
        inc_counter("llm_requests_total", {"operation": operation, "outcome": "success"})
        log_event("llm_call", model=self.model, outcome="success", ms_total=round(elapsed_ms, 2), **fields)

    def _record_failure(self, operation: Operation, error: FlightFinderError, start: float, **fields) -> None:
        elapsed_ms = (time.monotonic() - start) * 1000.0
        record_timing("llm_latency_ms", elapsed_ms, {"operation": operation})
        inc_counter("llm_requests_total", {"operation": operation, "outcome": error.kind})
        log_event(
            "llm_call",
            level="ERROR",
            model=self.model,
            outcome=error.kind,
            error=error.detail or error.user_message,
            ms_total=round(elapsed_ms, 2),
            **fields,
        )


def build_gateway(settings: Settings, transport_factory: TransportFactory = GeminiTransport) -> FlightFinderGateway:
    """Wire a gateway from configuration."""
    return FlightFinderGateway(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        currency=settings.PRICE_CURRENCY,
        min_options=settings.MIN_FLIGHT_OPTIONS,
        transport_factory=transport_factory,
    )
