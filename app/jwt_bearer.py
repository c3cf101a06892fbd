import jwt
from aws_lambda_powertools import Logger
from fastapi import HTTPException, Request, status
from fastapi.security.http import HTTPAuthorizationCredentials
from fastapi.security.http import HTTPBearer as FastAPIHTTPBearer
from fastapi.security.utils import get_authorization_scheme_param
from jwt import ExpiredSignatureError, InvalidTokenError
from pydantic import ValidationError

from app import settings
from app.models.auth import JWTToken

logger = Logger(utc=True)

ERROR_MESSAGE_INVALID_CREDENTIALS = "Invalid authentication credentials"
ERROR_MESSAGE_NOT_AUTHENTICATED = "Not authenticated"


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class HTTPBearer(FastAPIHTTPBearer):
    def __init__(self, auto_error: bool = True):
        super().__init__(auto_error=auto_error)
        self._auto_error = auto_error

    def __call__(self, request: Request) -> HTTPAuthorizationCredentials | None:
        authorization = request.headers.get("Authorization")
        if authorization is not None:
            return self._get_authorization_credentials_from_header(authorization)
        else:
            logger.debug(
                "Missing authentication header, attempt to use token query param"
            )
            return self._get_authorization_credentials_from_token(
                request.query_params.get("token")
            )

    def _get_authorization_credentials_from_header(
        self, authorization: str
    ) -> HTTPAuthorizationCredentials | None:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if not (authorization and scheme and credentials):
            logger.warning(f"Missing {scheme=} or credentials")
            if self._auto_error:
                raise _unauthenticated(ERROR_MESSAGE_NOT_AUTHENTICATED)
            else:
                return None
        if scheme.lower() != "bearer":
            logger.warning(f"Invalid {scheme=}")
            if self._auto_error:
                raise _unauthenticated(ERROR_MESSAGE_INVALID_CREDENTIALS)
            else:
                return None
        return HTTPAuthorizationCredentials(scheme=scheme, credentials=credentials)

    def _get_authorization_credentials_from_token(
        self, token: str | None
    ) -> HTTPAuthorizationCredentials | None:
        if not token:
            if self._auto_error:
                raise _unauthenticated(ERROR_MESSAGE_NOT_AUTHENTICATED)
            else:
                return None
        return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class JWTBearer:
    """Resolve the caller identity from a bearer JWT.

    With ``auto_error`` disabled a missing or invalid credential yields
    ``None`` so the route can serve anonymous callers.
    """

    def __init__(self, auto_error: bool = True):
        self._auto_error = auto_error

    def __call__(self, request: Request) -> JWTToken | None:
        credentials = HTTPBearer(self._auto_error).__call__(request)
        if not credentials:
            return None
        token = self._decode_token(credentials.credentials)
        if token is None and self._auto_error:
            logger.warning("Invalid authentication token")
            raise _unauthenticated(ERROR_MESSAGE_NOT_AUTHENTICATED)
        return token

    def _decode_token(self, token: str) -> JWTToken | None:
        try:
            return JWTToken(
                **jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
            )
        except ExpiredSignatureError:
            logger.exception("Expired signature")
        except InvalidTokenError:
            logger.exception("Error occurred during token decoding")
        except ValidationError:
            logger.exception("Token is missing required claims")
        return None
