"""
FastAPI dependency providers

Services are created once per process; tests replace them through
app.dependency_overrides.
"""
from functools import lru_cache

from civicai.agents.orchestrator import AnalysisPipeline, compile_pipeline
from civicai.config import get_settings
from civicai.repositories.ticket_store import JsonFileTicketStore
from civicai.services.authorities import AuthorityRegistry
from civicai.services.commissioner_service import CommissionerService
from civicai.services.geocoding import GeocodingClient
from civicai.services.llm_service import LLMService
from civicai.services.ticket_service import TicketService


@lru_cache()
def get_registry() -> AuthorityRegistry:
    return AuthorityRegistry(settings=get_settings())


@lru_cache()
def get_ticket_service() -> TicketService:
    settings = get_settings()
    store = JsonFileTicketStore(settings.ticket_store_path, settings.ticket_store_slot)
    return TicketService(store, settings=settings, registry=get_registry())


@lru_cache()
def get_llm_service() -> LLMService:
    return LLMService(get_settings())


@lru_cache()
def get_geocoder() -> GeocodingClient:
    return GeocodingClient(get_settings())


@lru_cache()
def get_pipeline() -> AnalysisPipeline:
    return compile_pipeline(
        llm=get_llm_service(),
        geocoder=get_geocoder(),
        registry=get_registry(),
    )


@lru_cache()
def get_commissioner_service() -> CommissionerService:
    return CommissionerService(get_ticket_service(), get_llm_service())
