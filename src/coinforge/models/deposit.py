"""Pydantic models for credit balance and deposit scanning."""

from pydantic import Field

from coinforge.models.common import CamelModel


class ScanDepositsRequest(CamelModel):
    wallet_address: str = Field(..., min_length=1, max_length=200)


class ScanDepositsResponse(CamelModel):
    credits: float
    credits_added: float
    new_transactions: list[str] = Field(default_factory=list)
    failed_sources: list[str] = Field(default_factory=list)


class CreditsResponse(CamelModel):
    credits: float
