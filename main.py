from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from flight_finder import __version__
from flight_finder.config import settings
from flight_finder.errors import FlightFinderError
from flight_finder.gateway import FlightFinderGateway, build_gateway
from flight_finder.obs.logger import log_event
from flight_finder.obs.metrics import get_metrics_snapshot
from flight_finder.obs.middleware import ObservabilityMiddleware
from flight_finder.types import (
    FlightSearchRequest,
    Itinerary,
    ItineraryRequest,
    SearchResult,
)

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.gateway = build_gateway(settings)
    log_event(
        "startup",
        app_env=settings.APP_ENV,
        model=settings.GEMINI_MODEL,
        configured=app.state.gateway.is_configured,
    )
    yield
    log_event("shutdown")


api = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    lifespan=lifespan,
)


def get_gateway(request: Request) -> FlightFinderGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        # TestClient used without a context manager skips lifespan
        gateway = build_gateway(settings)
        request.app.state.gateway = gateway
    return gateway


@api.exception_handler(FlightFinderError)
async def flight_finder_error_handler(request: Request, exc: FlightFinderError):
    log_event(
        "request_failed",
        level="ERROR",
        route=request.url.path,
        error_kind=exc.kind,
        error=exc.detail or exc.user_message,
    )
    return JSONResponse(
        {"error": exc.kind, "message": exc.user_message},
        status_code=exc.http_status,
    )


@api.get("/")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "status": "running",
        "model": settings.GEMINI_MODEL,
    }


@api.get("/health")
async def health(gateway: FlightFinderGateway = Depends(get_gateway)):
    return {
        "status": "healthy",
        "service": "flight-finder",
        "ai_configured": gateway.is_configured,
    }


@api.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@api.post("/flights/search", response_model=SearchResult)
async def search_flights(
    body: FlightSearchRequest,
    gateway: FlightFinderGateway = Depends(get_gateway),
):
    return await gateway.find_flights(body.query)


@api.post("/itinerary", response_model=Itinerary)
async def create_itinerary(
    body: ItineraryRequest,
    gateway: FlightFinderGateway = Depends(get_gateway),
):
    return await gateway.generate_itinerary(body.destination)


app = ObservabilityMiddleware(api)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
        log_level="info"
    )
