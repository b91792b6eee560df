"""Custom exception classes for the Coinforge API."""


class CoinforgeError(Exception):
    """Base exception for Coinforge."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(CoinforgeError):
    """Schema or request validation failure."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class UnknownJobError(CoinforgeError):
    """Job id is not (or no longer) tracked."""

    def __init__(self, job_id: str):
        super().__init__("UNKNOWN_JOB", "Invalid or missing jobId", {"job_id": job_id}, status_code=400)


class JobNotReadyError(CoinforgeError):
    """Job exists but has not reached the done state."""

    def __init__(self, job_id: str, status: str):
        super().__init__(
            "JOB_NOT_READY",
            "Not finished or generation error.",
            {"job_id": job_id, "status": status},
            status_code=400,
        )


class UnknownAccountError(CoinforgeError):
    """No account is registered for the wallet address."""

    def __init__(self, wallet_address: str):
        super().__init__(
            "UNKNOWN_ACCOUNT",
            "Invalid wallet address.",
            {"wallet_address": wallet_address},
            status_code=400,
        )


class InsufficientCreditsError(CoinforgeError):
    """Account balance does not cover the generation cost."""

    def __init__(self, wallet_address: str, required):
        super().__init__(
            "INSUFFICIENT_CREDITS",
            "Not enough credits to start a generation.",
            {"wallet_address": wallet_address, "required": str(required)},
            status_code=400,
        )


class NotFoundError(CoinforgeError):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            "NOT_FOUND",
            f"{resource} '{resource_id}' not found",
            status_code=404,
        )


class AuthenticationError(CoinforgeError):
    """Authentication required or credentials invalid."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class ConflictError(CoinforgeError):
    """Resource state conflict."""

    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status_code=409)


class ProviderError(CoinforgeError):
    """The generation provider failed or timed out."""

    def __init__(self, message: str, details=None):
        super().__init__("PROVIDER_ERROR", message, details, status_code=502)


class IndexerError(CoinforgeError):
    """A chain indexer could not be reached or returned an unusable payload."""

    def __init__(self, source: str, message: str):
        super().__init__("INDEXER_ERROR", message, {"source": source}, status_code=502)
        self.source = source


class WalletProviderError(CoinforgeError):
    """The wallet-creation collaborator failed."""

    def __init__(self, message: str):
        super().__init__("WALLET_PROVIDER_ERROR", message, status_code=502)


class ConfigurationError(CoinforgeError):
    """A required setting is missing."""

    def __init__(self, message: str):
        super().__init__("CONFIGURATION_ERROR", message, status_code=500)
