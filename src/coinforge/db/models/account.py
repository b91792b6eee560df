"""Account, processed-transaction ledger and generated-file history tables."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coinforge.db.base import Base, TimestampMixin

# Credits and deposit amounts keep 8 fractional digits (1 sompi).
CREDIT_TYPE = Numeric(precision=28, scale=8)


class AccountRow(Base, TimestampMixin):
    __tablename__ = "accounts"

    account_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    username: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    wallet_address: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    credential_hash: Mapped[str] = mapped_column(Text, nullable=False)
    wallet_secret_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    credits: Mapped[Decimal] = mapped_column(CREDIT_TYPE, nullable=False, default=Decimal("0"))


class ProcessedTransactionRow(Base):
    __tablename__ = "processed_transactions"

    account_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("accounts.account_id"), primary_key=True
    )
    external_tx_id: Mapped[str] = mapped_column(String(200), primary_key=True)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    currency: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(CREDIT_TYPE, nullable=False)
    credits_added: Mapped[Decimal] = mapped_column(CREDIT_TYPE, nullable=False)
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class GeneratedFileRow(Base):
    __tablename__ = "generated_files"

    file_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    account_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("accounts.account_id"), nullable=False, index=True
    )
    job_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
