"""JWT Bearer authentication middleware.

Tokens are issued by the external identity provider and signed with the
shared secret from settings. The ``sub`` claim identifies the project owner.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from specforge.logging_config import bind_request_context

logger = logging.getLogger(__name__)

_ANONYMOUS = {"sub": "anonymous"}


def _decode_jwt(token: str, settings) -> dict:
    from jose import JWTError, jwt

    options = {
        "verify_aud": settings.jwt_audience is not None,
        "verify_iss": settings.jwt_issuer is not None,
    }
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options=options,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc


class AuthMiddleware(BaseHTTPMiddleware):
    """Validate a Bearer token when present and attach user info to request.state.

    Requests without a token continue as anonymous; routes that need an
    owner enforce it through the ``CurrentUser`` dependency.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        auth_header = request.headers.get("authorization", "")

        if auth_header.startswith("Bearer "):
            user_info = self._validate_jwt(auth_header[7:], request.app.state.settings)
        else:
            user_info = dict(_ANONYMOUS)

        request.state.user = user_info
        bind_request_context(user_id=user_info.get("sub"))
        return await call_next(request)

    @staticmethod
    def _validate_jwt(token: str, settings) -> dict:
        try:
            payload = _decode_jwt(token, settings)
        except ValueError:
            return {**_ANONYMOUS, "_auth_error": "invalid_token"}

        return {
            "sub": payload.get("sub", ""),
            "email": payload.get("email", ""),
        }
