"""Pull structured data out of model replies.

Two strategies, matched to how the model was asked to answer:

* flight search runs with the web-search tool, so the model answers in free
  text and the data sits in a ```json fenced block;
* itinerary generation runs in strict JSON mode with a response schema, so
  the whole body is the document.

Both fail closed with MalformedResponse. Callers never get partial data.
"""

import json
import re
from typing import Any, List

from pydantic import TypeAdapter, ValidationError

from flight_finder.errors import MalformedResponse
from flight_finder.types import FlightOption, Itinerary

FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)

FLIGHTS_UNREADABLE = "Could not parse flight data from the AI's response. Please try again."
ITINERARY_UNREADABLE = "The AI returned an itinerary we could not read. Please try again."

_flight_list = TypeAdapter(List[FlightOption])


def extract_fenced_json(text: str) -> str:
    m = FENCED_JSON.search(text or "")
    if not m:
        raise MalformedResponse(FLIGHTS_UNREADABLE, detail="no ```json block in response")
    return m.group(1)


def _loads(raw: str, user_message: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedResponse(user_message, detail=f"invalid JSON: {e}") from e


def parse_flights(text: str) -> List[FlightOption]:
    """Parse the fenced flight array, keeping the model's ordering."""
    data = _loads(extract_fenced_json(text), FLIGHTS_UNREADABLE)
    try:
        return _flight_list.validate_python(data)
    except ValidationError as e:
        raise MalformedResponse(
            FLIGHTS_UNREADABLE,
            detail=f"flight data has the wrong shape: {e.error_count()} error(s)",
        ) from e


def parse_itinerary(body: str) -> Itinerary:
    data = _loads((body or "").strip(), ITINERARY_UNREADABLE)
    try:
        return Itinerary.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(
            ITINERARY_UNREADABLE,
            detail=f"itinerary violates schema: {e.error_count()} error(s)",
        ) from e
