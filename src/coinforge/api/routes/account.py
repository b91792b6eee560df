"""Authenticated account view."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.dependencies import get_current_user, get_db
from coinforge.errors.exceptions import NotFoundError
from coinforge.models.account import (
    AccountResponse,
    GeneratedFileSummary,
    ProcessedTransactionEntry,
)
from coinforge.repositories.account_repo import AccountRepository
from coinforge.repositories.generated_file_repo import GeneratedFileRepository
from coinforge.repositories.transaction_repo import ProcessedTransactionRepository

router = APIRouter(tags=["Account"])


@router.get("/account", response_model=AccountResponse)
async def get_account(user: dict = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    account = await AccountRepository(db).get(user["sub"])
    if account is None:
        raise NotFoundError("Account", user["sub"])

    files = await GeneratedFileRepository(db).list_for_account(account.account_id)
    ledger = await ProcessedTransactionRepository(db).list_for_account(account.account_id)
    return AccountResponse(
        account_id=account.account_id,
        username=account.username,
        wallet_address=account.wallet_address,
        credits=account.credits,
        generated_files=[
            GeneratedFileSummary(
                file_id=f.file_id, job_id=f.job_id, created_at=f.created_at, size=len(f.content)
            )
            for f in files
        ],
        processed_transactions=[
            ProcessedTransactionEntry(
                external_tx_id=t.external_tx_id,
                source=t.source,
                currency=t.currency,
                amount=t.amount,
                credits_added=t.credits_added,
                observed_at=t.observed_at,
            )
            for t in ledger
        ],
    )
