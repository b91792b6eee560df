"""Wallet creation and login routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.config import settings
from coinforge.dependencies import get_db, get_wallet_provider
from coinforge.models.account import (
    CreateWalletRequest,
    CreateWalletResponse,
    GeneratedFileEntry,
    LoginRequest,
    TokenResponse,
    WalletDetailsResponse,
)
from coinforge.repositories.generated_file_repo import GeneratedFileRepository
from coinforge.services.accounts import authenticate, create_account, reveal_wallet_secret
from coinforge.services.security import make_access_token

router = APIRouter(tags=["Auth"])


@router.post("/auth/create-wallet", response_model=CreateWalletResponse, status_code=201)
async def create_wallet(
    body: CreateWalletRequest,
    db: AsyncSession = Depends(get_db),
    wallet_provider=Depends(get_wallet_provider),
):
    account, keys = await create_account(db, wallet_provider, body.username, body.password)
    return CreateWalletResponse(
        username=account.username,
        wallet_address=account.wallet_address,
        mnemonic=keys.mnemonic,
        xprv=keys.xprv,
    )


@router.post("/auth/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    account = await authenticate(db, body.wallet_address, body.password)
    return TokenResponse(
        access_token=make_access_token(account.account_id, account.wallet_address),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        wallet_address=account.wallet_address,
    )


@router.post("/auth/wallet-details", response_model=WalletDetailsResponse)
async def wallet_details(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    account = await authenticate(db, body.wallet_address, body.password)
    secret = reveal_wallet_secret(account)
    files = await GeneratedFileRepository(db).list_for_account(account.account_id)
    return WalletDetailsResponse(
        username=account.username,
        wallet_address=account.wallet_address,
        mnemonic=secret["mnemonic"],
        xprv=secret["xPrv"],
        credits=account.credits,
        generated_files=[
            GeneratedFileEntry(job_id=f.job_id, content=f.content, created_at=f.created_at)
            for f in files
        ],
    )
