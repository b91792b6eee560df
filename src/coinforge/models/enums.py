"""String enums used across the API and services."""

from enum import StrEnum


class JobStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class DepositSource(StrEnum):
    KRC20 = "krc20"
    KASPA = "kaspa"


class ExportFormat(StrEnum):
    RAW = "raw"
    TEMPLATED = "templated"
