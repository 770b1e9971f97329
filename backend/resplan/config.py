"""Application configuration."""
from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine defaults and application settings from environment."""

    # Application
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Calendar
    capacity_factor: Decimal = Decimal("0.85")
    half_day_weight: Decimal = Decimal("0.5")

    # Effort / cost model
    hours_per_day: int = 8
    default_tier_level: int = 2
    default_skill_sensitivity: Decimal = Decimal("0.5")
    # Junior=1.4, Mid=1.0, Senior=0.8, Lead=0.7, Principal=0.6
    tier_skill_multipliers: dict[int, Decimal] = {
        1: Decimal("1.4"),
        2: Decimal("1.0"),
        3: Decimal("0.8"),
        4: Decimal("0.7"),
        5: Decimal("0.6"),
    }
    pert_optimistic_factor: Decimal = Decimal("0.7")
    pert_pessimistic_factor: Decimal = Decimal("1.5")

    # Capacity thresholds
    default_over_allocation_threshold: Decimal = Decimal("1.2")
    high_utilization_threshold: Decimal = Decimal("0.8")
    max_concurrent_allocations: int = 5
    strict_enforcement: bool = False
    completion_phases: List[str] = ["Completed", "Idle"]

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
