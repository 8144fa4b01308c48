"""
CivicAI - Configuration Management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Dict


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000

    # LLM (Gemini)
    google_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.3
    persona_max_output_tokens: int = 100

    # Ticket store
    ticket_store_path: str = "data/tickets.json"
    ticket_store_slot: str = "civic_ai_tickets"

    # Lifecycle
    escalation_threshold_minutes: float = 2.0  # Fast for demo purposes
    default_authority_id: str = "auth_muni"
    resolution_windows: Dict[str, str] = {
        "Low": "7 days",
        "Medium": "3 days",
        "High": "24 hours",
        "Emergency": "4 hours",
    }

    # Geocoding (Nominatim)
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "civicai-backend/1.0"
    geocoding_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @property
    def escalation_threshold_ms(self) -> int:
        """Escalation threshold in epoch milliseconds"""
        return int(self.escalation_threshold_minutes * 60 * 1000)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
