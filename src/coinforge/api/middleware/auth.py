"""JWT Bearer authentication middleware."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from coinforge.services.security import decode_access_token

logger = logging.getLogger(__name__)

_ANONYMOUS = {"sub": "anonymous"}


class AuthMiddleware(BaseHTTPMiddleware):
    """Validate a Bearer token when present and attach its claims to request.state.

    Routes that need an account enforce it through ``get_current_user``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        auth_header = request.headers.get("authorization", "")

        if auth_header.startswith("Bearer "):
            request.state.user = self._validate_jwt(auth_header[7:])
        else:
            request.state.user = dict(_ANONYMOUS)

        return await call_next(request)

    def _validate_jwt(self, token: str) -> dict:
        try:
            payload = decode_access_token(token)
        except ValueError:
            return {**_ANONYMOUS, "_auth_error": "invalid_token"}
        return {
            "sub": payload.get("sub", ""),
            "wallet_address": payload.get("wallet", ""),
        }
