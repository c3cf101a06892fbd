import uuid
from contextvars import ContextVar
from datetime import datetime, timedelta
from typing import Any

from aws_lambda_powertools import Logger
from fastapi import status
from fastapi.requests import Request
from fastapi.responses import Response, UJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app import settings

X_CORRELATION_ID = "X-Correlation-ID"

correlation_id: ContextVar[str] = ContextVar(X_CORRELATION_ID)
logger = Logger(utc=True)

clients: dict[str, Any] = {}


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        aws_context = request.scope.get("aws.context")
        correlation_id.set(
            request.headers.get(X_CORRELATION_ID)
            or (aws_context.aws_request_id if aws_context else str(uuid.uuid4()))
        )
        logger.set_correlation_id(correlation_id.get())
        response = await call_next(request)
        response.headers[X_CORRELATION_ID] = correlation_id.get()
        return response


class RateLimitingMiddleware(BaseHTTPMiddleware):
    RATE_LIMIT_DURATION = timedelta(seconds=settings.rate_limit_duration_in_seconds)

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.rate_limiting:
            return await call_next(request)
        client_ip = request.client.host if request.client else None
        if not client_ip:
            logger.warning("Missing client information. Skipping rate limiting")
            return await call_next(request)
        rate_limited_response = self._check_rate_limit(client_ip)
        if rate_limited_response:
            return rate_limited_response
        response = await call_next(request)
        client = clients.get(client_ip)
        if client is not None:
            response.headers.update(self._get_rate_limit_headers(client))
        return response

    def _check_rate_limit(self, client_ip: str) -> UJSONResponse | None:
        now = datetime.now()
        self._evict_expired(now)
        client = clients.setdefault(
            client_ip, {"request_count": 0, "window_start": now}
        )
        if client["request_count"] >= settings.rate_limit_requests:
            logger.warning(
                "The client has exceeded the rate limit and has been rate limited",
                host=client_ip,
            )
            return UJSONResponse(
                content={"message": "Rate limit exceeded. Please try again later"},
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=self._get_rate_limit_headers(client),
            )
        client["request_count"] += 1
        return None

    def _evict_expired(self, now: datetime):
        expired = [
            client_ip
            for client_ip, client in clients.items()
            if now - client["window_start"] >= self.RATE_LIMIT_DURATION
        ]
        for client_ip in expired:
            del clients[client_ip]

    def _get_rate_limit_headers(self, client: dict[str, Any]) -> dict[str, str]:
        reset_at = client["window_start"] + self.RATE_LIMIT_DURATION
        return {
            "X-RateLimit-Limit": str(settings.rate_limit_requests),
            "X-RateLimit-Remaining": str(
                max(settings.rate_limit_requests - client["request_count"], 0)
            ),
            "X-RateLimit-Reset": str(int(reset_at.timestamp())),
        }
