import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripwise.api.routers.chat import router as chat_router
from tripwise.api.routers.diagnostics import router as diagnostics_router
from tripwise.api.routers.itineraries import router as itineraries_router
from tripwise.api.routers.places import router as places_router
from tripwise.api.routers.swap import router as swap_router
from tripwise.core.activity_swap import ActivitySwapper
from tripwise.core.chat_advisor import ChatAdvisor
from tripwise.core.llm_provider import LLMProvider
from tripwise.core.orchestrator import ItineraryOrchestrator
from tripwise.core.place_aggregator import PlaceAggregator
from tripwise.core.places_service import PlacesService
from tripwise.core.repository import ItineraryRepository, create_repository
from tripwise.core.settings import Settings, get_settings


def create_app(
    settings: Settings | None = None,
    places_service: PlacesService | None = None,
    llm_provider: LLMProvider | None = None,
    itinerary_repo: ItineraryRepository | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(title="Tripwise Backend")

    # Expo dev server and web preview
    allowed_origins = [
        "http://localhost:8081",
        "http://localhost:19006",
        "http://127.0.0.1:8081",
        "http://127.0.0.1:19006",
    ]
    if settings.allowed_origins:
        allowed_origins.extend(
            [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    places_service = places_service or PlacesService(settings.google_places_api_key)
    llm = llm_provider or LLMProvider(
        settings.ollama_url,
        settings.ollama_model,
        probe_timeout=settings.probe_timeout_seconds,
    )
    aggregator = PlaceAggregator(places_service, timeout_seconds=settings.places_timeout_seconds)

    application.state.settings = settings
    application.state.places_service = places_service
    application.state.llm = llm
    application.state.orchestrator = ItineraryOrchestrator(aggregator, llm, settings)
    application.state.swapper = ActivitySwapper(
        llm, timeout_seconds=settings.generation_timeout_seconds
    )
    application.state.advisor = ChatAdvisor(llm, timeout_seconds=settings.chat_timeout_seconds)
    application.state.itinerary_repo = itinerary_repo or create_repository(
        settings.mongodb_uri, settings.database_name, settings.history_limit
    )

    application.include_router(itineraries_router)
    application.include_router(swap_router)
    application.include_router(chat_router)
    application.include_router(places_router)
    application.include_router(diagnostics_router)
    return application


app = create_app()
