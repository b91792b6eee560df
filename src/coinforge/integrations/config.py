"""Configuration models for deposit source endpoints."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from coinforge.models.enums import DepositSource


class DepositSourceConfig(BaseModel):
    """A configured chain indexer feed."""

    model_config = ConfigDict(extra="forbid")

    source: DepositSource
    base_url: str
    currency: str
    credits_per_unit: Decimal = Field(..., ge=0)
    page_limit: int = Field(50, ge=1, le=500)
    max_pages: int = Field(5, ge=1)
    timeout_seconds: float = Field(30.0, gt=0)
    enabled: bool = True
    labels: dict[str, str] = Field(default_factory=dict)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


def sources_from_settings(settings) -> list[DepositSourceConfig]:
    """Build the two feed configurations from application settings."""
    return [
        DepositSourceConfig(
            source=DepositSource.KRC20,
            base_url=settings.kasplex_api_url,
            currency=settings.krc20_tick,
            credits_per_unit=settings.krc20_credits_per_unit,
            page_limit=settings.deposit_page_limit,
            max_pages=settings.deposit_max_pages,
            timeout_seconds=settings.indexer_timeout_seconds,
            labels={"tick": settings.krc20_tick},
        ),
        DepositSourceConfig(
            source=DepositSource.KASPA,
            base_url=settings.kaspa_api_url,
            currency="KAS",
            credits_per_unit=settings.kaspa_credits_per_unit,
            page_limit=settings.deposit_page_limit,
            max_pages=settings.deposit_max_pages,
            timeout_seconds=settings.indexer_timeout_seconds,
        ),
    ]
