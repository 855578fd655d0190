from google.genai import types

ITINERARY_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(
            type=types.Type.STRING,
            description="The overall title for the itinerary, e.g., 'A 3-Day Adventure in London'",
        ),
        "days": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "day": types.Schema(
                        type=types.Type.NUMBER,
                        description="The day number, e.g., 1",
                    ),
                    "title": types.Schema(
                        type=types.Type.STRING,
                        description="A catchy title for the day's plan, e.g., 'Historic Landmarks & Theatrics'",
                    ),
                    "activities": types.Schema(
                        type=types.Type.ARRAY,
                        items=types.Schema(
                            type=types.Type.OBJECT,
                            properties={
                                "time": types.Schema(
                                    type=types.Type.STRING,
                                    description="A time block, e.g., 'Morning', 'Afternoon', 'Evening'",
                                ),
                                "description": types.Schema(
                                    type=types.Type.STRING,
                                    description="A detailed description of the activity or suggestion.",
                                ),
                            },
                            required=["time", "description"],
                        ),
                    ),
                },
                required=["day", "title", "activities"],
            ),
        ),
    },
    required=["title", "days"],
)
