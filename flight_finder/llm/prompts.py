from langchain_core.prompts import PromptTemplate

ITINERARY_DAYS = 3

SEARCH = """You are a world-class flight travel expert. Your task is to find flight routes based on the user's query.
Use the Google Search tool to find the most relevant and up-to-date information.

User Query: "{query}"

Your response MUST be a JSON array of flight objects wrapped in a markdown JSON code block.
Each object in the array should represent a unique flight option and must have the following structure:
{{
  "from": "Departure Airport Code (e.g., JFK)",
  "to": "Arrival Airport Code (e.g., LHR)",
  "airline": "Airline Name",
  "price": <numeric value in {currency}, without currency symbol>,
  "stops": <number of stops>,
  "duration": "Total travel time (e.g., '12h 30m')"
}}
Do not include any text outside of the markdown JSON code block. Provide at least {min_options} options if possible.
"""

ITINERARY = """Generate a detailed and engaging {days}-day travel itinerary for a trip to {destination}. \
The itinerary should be creative and include a mix of popular attractions, local experiences, and dining suggestions. \
For each day, provide the day number, a title and a list of activities with suggested times (e.g., "Morning", "Afternoon", "Evening")."""

_search_prompt = PromptTemplate.from_template(SEARCH)
_itinerary_prompt = PromptTemplate.from_template(ITINERARY)


def build_search_prompt(query: str, currency: str = "INR", min_options: int = 5) -> str:
    return _search_prompt.format(query=query, currency=currency, min_options=min_options)


def build_itinerary_prompt(destination: str, days: int = ITINERARY_DAYS) -> str:
    return _itinerary_prompt.format(destination=destination, days=days)
