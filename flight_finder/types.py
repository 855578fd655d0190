from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from typing import List, Union

class FlightOption(BaseModel):
    """One flight route as reported by the model, in relevance order.

    Fields are strict: values the model got wrong are rejected, not coerced.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    origin: StrictStr = Field(..., alias="from", description="Departure airport code, e.g. JFK")
    destination: StrictStr = Field(..., alias="to", description="Arrival airport code, e.g. LHR")
    airline: StrictStr
    price: Union[StrictInt, StrictFloat] = Field(..., description="Numeric price without currency symbol")
    stops: StrictInt = Field(..., ge=0)
    duration: StrictStr = Field(..., description="Total travel time, e.g. '12h 30m'")

class GroundingSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    title: str

class Activity(BaseModel):
    time: str = Field(..., description="Time block, e.g. 'Morning'")
    description: str

class ItineraryDay(BaseModel):
    day: int = Field(..., ge=1)
    title: str
    activities: List[Activity]

class Itinerary(BaseModel):
    title: str
    days: List[ItineraryDay] = Field(..., min_length=1)

class SearchResult(BaseModel):
    flights: List[FlightOption] = Field(default_factory=list)
    sources: List[GroundingSource] = Field(default_factory=list)

# HTTP request bodies

class FlightSearchRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1, description="Free-text route query, e.g. 'flights from NYC to London'")

class ItineraryRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    destination: str = Field(..., min_length=1)
