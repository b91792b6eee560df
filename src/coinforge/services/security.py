"""Credential hashing, wallet-secret encryption and access tokens."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet, InvalidToken
from jose import JWTError, jwt

from coinforge.config import settings
from coinforge.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# ── Passwords ──────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    h = hashlib.sha256(f"{salt}:{password}".encode()).hexdigest()
    return f"{salt}:{h}"


def verify_password(password: str, hashed: str) -> bool:
    parts = hashed.split(":", 1)
    if len(parts) != 2:
        return False
    salt, stored = parts
    h = hashlib.sha256(f"{salt}:{password}".encode()).hexdigest()
    return secrets.compare_digest(h, stored)


# ── Wallet secrets ─────────────────────────────────────────────────────────────

def get_fernet() -> Fernet:
    key = settings.wallet_encryption_key
    if not key:
        raise ConfigurationError("COINFORGE_WALLET_ENCRYPTION_KEY is not set.")
    return Fernet(key)


def encrypt_secret(secret: str) -> str:
    f = get_fernet()
    return f.encrypt(secret.encode()).decode()


def decrypt_secret(encrypted_secret: str) -> str:
    f = get_fernet()
    try:
        return f.decrypt(encrypted_secret.encode()).decode()
    except InvalidToken as exc:
        raise ConfigurationError("Stored wallet secret cannot be decrypted with the configured key") from exc


# ── Access tokens ──────────────────────────────────────────────────────────────

def make_access_token(account_id: str, wallet_address: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": account_id,
        "wallet": wallet_address,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc
    if payload.get("type") != "access":
        raise ValueError("Not an access token")
    return payload
