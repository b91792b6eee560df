"""Normalized data models: canonical intermediates between chain indexers and the ledger."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from coinforge.models.enums import DepositSource

# Both feeds report amounts in 1e-8 base units (sompi)
BASE_UNITS_PER_COIN = 10**8


class NormalizedDeposit(BaseModel):
    """One creditable deposit to one address, whatever feed it came from.

    Source adapters convert indexer payloads INTO this model; the reconciler
    only ever sees this shape.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    external_id: str = Field(..., min_length=1)
    source: DepositSource
    currency: str
    destination_address: str
    raw_amount: int = Field(..., gt=0)  # base units
    amount: Decimal = Field(..., gt=0)  # whole coins
    raw_record: dict | None = None  # Original payload for traceability


def to_whole_units(raw_amount: int) -> Decimal:
    return Decimal(raw_amount) / BASE_UNITS_PER_COIN
