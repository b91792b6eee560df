"""Credit balance and on-demand deposit scanning."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.dependencies import get_db, get_reconciler
from coinforge.errors.exceptions import UnknownAccountError
from coinforge.logging_config import bind_wallet_context
from coinforge.models.deposit import CreditsResponse, ScanDepositsRequest, ScanDepositsResponse
from coinforge.repositories.account_repo import AccountRepository

router = APIRouter(tags=["Deposits"])


@router.post("/scan-deposits", response_model=ScanDepositsResponse)
async def scan_deposits(body: ScanDepositsRequest, reconciler=Depends(get_reconciler)):
    """Reconcile both deposit feeds for one wallet now and return the new balance."""
    bind_wallet_context(body.wallet_address)
    result = await reconciler.reconcile_one(body.wallet_address)
    return ScanDepositsResponse(
        credits=result.credits or 0,
        credits_added=result.credits_added,
        new_transactions=result.new_transactions,
        failed_sources=result.failed_sources,
    )


@router.get("/get-credits", response_model=CreditsResponse)
async def get_credits(
    wallet_address: str = Query(..., alias="walletAddress", min_length=1),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountRepository(db).get_by_wallet(wallet_address)
    if account is None:
        raise UnknownAccountError(wallet_address)
    return CreditsResponse(credits=account.credits)
