"""Account creation and authentication."""

import json
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coinforge.db.models.account import AccountRow
from coinforge.errors.exceptions import AuthenticationError, ConflictError
from coinforge.repositories.account_repo import AccountRepository
from coinforge.services.id_generator import generate_id
from coinforge.services.security import (
    decrypt_secret,
    encrypt_secret,
    hash_password,
    verify_password,
)
from coinforge.services.wallet import WalletKeys, WalletProvider

logger = logging.getLogger(__name__)


async def create_account(
    session: AsyncSession,
    wallet_provider: WalletProvider,
    username: str,
    password: str,
) -> tuple[AccountRow, WalletKeys]:
    """Create a custodial wallet and the account that owns it."""
    repo = AccountRepository(session)
    if await repo.get_by_username(username) is not None:
        raise ConflictError(f"Username '{username}' already exists")

    keys = await wallet_provider.create_wallet()
    secret = json.dumps({"mnemonic": keys.mnemonic, "xPrv": keys.xprv})

    try:
        account = await repo.create(
            account_id=generate_id("acct_"),
            username=username,
            wallet_address=keys.receiving_address,
            credential_hash=hash_password(password),
            wallet_secret_encrypted=encrypt_secret(secret),
            credits=Decimal("0"),
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ConflictError("Username or wallet address already registered") from exc

    logger.info("Created account %s for wallet %s", account.account_id, account.wallet_address)
    return account, keys


async def authenticate(session: AsyncSession, wallet_address: str, password: str) -> AccountRow:
    account = await AccountRepository(session).get_by_wallet(wallet_address)
    if account is None or not verify_password(password, account.credential_hash):
        raise AuthenticationError("Invalid wallet address or password")
    return account


def reveal_wallet_secret(account: AccountRow) -> dict:
    """Return ``{"mnemonic", "xPrv"}`` for an authenticated account."""
    return json.loads(decrypt_secret(account.wallet_secret_encrypted))
