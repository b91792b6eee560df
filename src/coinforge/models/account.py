"""Pydantic models for account creation, login and account views."""

from datetime import datetime

from pydantic import Field

from coinforge.models.common import CamelModel


class CreateWalletRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=500)


class CreateWalletResponse(CamelModel):
    username: str
    wallet_address: str
    mnemonic: str
    xprv: str = Field(..., serialization_alias="xPrv")


class LoginRequest(CamelModel):
    wallet_address: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=500)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    wallet_address: str


class GeneratedFileSummary(CamelModel):
    file_id: str
    job_id: str
    created_at: datetime
    size: int


class GeneratedFileEntry(CamelModel):
    job_id: str
    content: str
    created_at: datetime


class ProcessedTransactionEntry(CamelModel):
    external_tx_id: str
    source: str
    currency: str
    amount: float
    credits_added: float
    observed_at: datetime


class WalletDetailsResponse(CamelModel):
    username: str
    wallet_address: str
    mnemonic: str
    xprv: str = Field(..., serialization_alias="xPrv")
    credits: float
    generated_files: list[GeneratedFileEntry] = Field(default_factory=list)


class AccountResponse(CamelModel):
    account_id: str
    username: str
    wallet_address: str
    credits: float
    generated_files: list[GeneratedFileSummary] = Field(default_factory=list)
    processed_transactions: list[ProcessedTransactionEntry] = Field(default_factory=list)
