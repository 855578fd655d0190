import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from google.genai import errors as genai_errors

from flight_finder.config import Settings
from flight_finder.errors import (
    ConfigurationError,
    MalformedResponse,
    ServiceUnavailable,
    TransportError,
)
from flight_finder.gateway import FlightFinderGateway, build_gateway
from flight_finder.llm.schemas import ITINERARY_SCHEMA
from flight_finder.llm.transport import ModelReply
from flight_finder.obs.context import operation_var
from flight_finder.obs.metrics import get_counter
from flight_finder.types import GroundingSource, Itinerary


SEARCH_TEXT = '```json\n[{"from":"JFK","to":"LHR","airline":"Acme Air","price":45000,"stops":1,"duration":"11h 20m"}]\n```'

ITINERARY_TEXT = (
    '{"title": "Three Days in Lisbon", "days": ['
    '{"day": 1, "title": "Alfama", "activities": [{"time": "Morning", "description": "Tram 28"}]},'
    '{"day": 2, "title": "Belem", "activities": [{"time": "Afternoon", "description": "Pasteis"}]},'
    '{"day": 3, "title": "Sintra", "activities": [{"time": "Evening", "description": "Fado"}]}]}'
)


class TestFindFlights:
    async def test_end_to_end_search(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(
            text=SEARCH_TEXT,
            citations=[
                {"uri": "https://fares.example/jfk-lhr", "title": "JFK to LHR fares"},
                {"uri": "https://fares.example/jfk-lhr", "title": "Same page again"},
            ],
        )
        gateway = make_gateway()

        result = await gateway.find_flights("JFK to London")

        assert len(result.flights) == 1
        flight = result.flights[0]
        assert (flight.origin, flight.destination, flight.airline) == ("JFK", "LHR", "Acme Air")
        assert flight.price == 45000
        assert flight.stops == 1
        assert flight.duration == "11h 20m"
        assert result.sources == [
            GroundingSource(uri="https://fares.example/jfk-lhr", title="JFK to LHR fares")
        ]

    async def test_prompt_carries_query_and_settings(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=SEARCH_TEXT)
        gateway = make_gateway(currency="USD", min_options=3)

        await gateway.find_flights("SFO to Tokyo")

        prompt = fake_transport.search_prompts[0]
        assert '"SFO to Tokyo"' in prompt
        assert "numeric value in USD" in prompt
        assert "at least 3 options" in prompt

    async def test_missing_block_fails_closed(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(
            text="Sorry, I could not find any flights.",
            citations=[{"uri": "https://a.example", "title": "A"}],
        )
        gateway = make_gateway()

        with pytest.raises(MalformedResponse):
            await gateway.find_flights("JFK to LHR")
        assert get_counter("llm_requests_total", {"operation": "search", "outcome": "malformed_response"}) == 1

    async def test_transport_failure_is_service_unavailable(self, make_gateway, fake_transport):
        fake_transport.error = TransportError("quota exceeded", status=429)
        gateway = make_gateway()

        with pytest.raises(ServiceUnavailable) as exc:
            await gateway.find_flights("JFK to LHR")
        assert "try again later" in exc.value.user_message
        assert isinstance(exc.value.__cause__, TransportError)

    async def test_rejected_key_is_configuration_error(self, make_gateway, fake_transport):
        fake_transport.error = TransportError("API key not valid", status=403)
        gateway = make_gateway()

        with pytest.raises(ConfigurationError):
            await gateway.find_flights("JFK to LHR")

    async def test_success_is_counted(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=SEARCH_TEXT)
        gateway = make_gateway()

        await gateway.find_flights("JFK to LHR")

        assert get_counter("llm_requests_total", {"operation": "search", "outcome": "success"}) == 1


class TestGenerateItinerary:
    async def test_returns_itinerary(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=ITINERARY_TEXT)
        gateway = make_gateway()

        itinerary = await gateway.generate_itinerary("Lisbon")

        assert isinstance(itinerary, Itinerary)
        assert itinerary.title == "Three Days in Lisbon"
        assert [d.day for d in itinerary.days] == [1, 2, 3]

    async def test_uses_declared_schema(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=ITINERARY_TEXT)
        gateway = make_gateway()

        await gateway.generate_itinerary("Lisbon")

        prompt, schema = fake_transport.structured_calls[0]
        assert "trip to Lisbon" in prompt
        assert schema is ITINERARY_SCHEMA
        assert fake_transport.search_prompts == []

    async def test_schema_violation_is_malformed(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text='{"title": "T", "days": [{"day": 1, "title": "D"}]}')
        gateway = make_gateway()

        with pytest.raises(MalformedResponse):
            await gateway.generate_itinerary("Lisbon")

    async def test_failure_message_names_destination(self, make_gateway, fake_transport):
        fake_transport.error = TransportError("connection reset")
        gateway = make_gateway()

        with pytest.raises(ServiceUnavailable) as exc:
            await gateway.generate_itinerary("Lisbon")
        assert exc.value.user_message == "Failed to generate an itinerary for Lisbon. Please try again."


class TestCredential:
    @pytest.mark.parametrize("api_key", [None, "", "   "])
    async def test_search_without_key_never_calls_out(self, make_gateway, fake_transport, api_key):
        gateway = make_gateway(api_key=api_key)

        with pytest.raises(ConfigurationError) as exc:
            await gateway.find_flights("JFK to LHR")

        assert "API key" in exc.value.user_message
        assert fake_transport.call_count == 0
        assert gateway.factory_calls == []

    async def test_itinerary_without_key_never_calls_out(self, make_gateway, fake_transport):
        gateway = make_gateway(api_key=None)

        with pytest.raises(ConfigurationError):
            await gateway.generate_itinerary("Lisbon")

        assert fake_transport.call_count == 0
        assert gateway.factory_calls == []

    async def test_transport_is_built_once_lazily(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=SEARCH_TEXT)
        gateway = make_gateway(model="gemini-test")
        assert gateway.factory_calls == []

        await gateway.find_flights("a")
        await gateway.find_flights("b")

        assert gateway.factory_calls == [("test-key", "gemini-test")]

    def test_is_configured(self):
        assert FlightFinderGateway(api_key="k").is_configured
        assert not FlightFinderGateway(api_key=None).is_configured


def test_build_gateway_from_settings():
    settings = Settings(
        GEMINI_API_KEY="abc",
        GEMINI_MODEL="gemini-x",
        PRICE_CURRENCY="GBP",
        MIN_FLIGHT_OPTIONS=8,
        _env_file=None,
    )
    gateway = build_gateway(settings)
    assert gateway.api_key == "abc"
    assert gateway.model == "gemini-x"
    assert gateway.currency == "GBP"
    assert gateway.min_options == 8


class TestGeminiFailuresAreClassified:
    @pytest.mark.parametrize("error", [
        genai_errors.UnknownApiResponseError("not json"),
        asyncio.TimeoutError(),
        genai_errors.ServerError(503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}),
    ])
    async def test_sdk_failures_end_as_service_unavailable(self, error):
        with patch("flight_finder.llm.transport.genai.Client") as client_cls:
            client_cls.return_value.aio.models.generate_content = AsyncMock(side_effect=error)
            gateway = FlightFinderGateway(api_key="k")

            with pytest.raises(ServiceUnavailable):
                await gateway.find_flights("JFK to LHR")
            with pytest.raises(ServiceUnavailable) as exc:
                await gateway.generate_itinerary("Lisbon")

        assert "Lisbon" in exc.value.user_message


class TestOperationContext:
    async def test_operation_is_reset_after_success(self, make_gateway, fake_transport):
        fake_transport.reply = ModelReply(text=SEARCH_TEXT)

        await make_gateway().find_flights("JFK to LHR")

        assert operation_var.get() is None

    async def test_operation_is_reset_after_failure(self, make_gateway):
        with pytest.raises(ConfigurationError):
            await make_gateway(api_key=None).generate_itinerary("Lisbon")

        assert operation_var.get() is None

    async def test_operation_is_visible_during_the_call(self, make_gateway, fake_transport):
        seen = []

        async def search(prompt):
            seen.append(operation_var.get())
            return ModelReply(text=SEARCH_TEXT)

        fake_transport.search = search
        await make_gateway().find_flights("JFK to LHR")

        assert seen == ["search"]
