from typing import Any
from urllib.parse import quote

import httpx
from aws_lambda_powertools import Logger
from httpx import HTTPError

from blog_client.exceptions import PostsClientException
from blog_client.session import Session

BASE_PATH = "/api/v1/posts"
DEFAULT_TIMEOUT = 10.0


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["message"]
    except (ValueError, KeyError, TypeError):
        return response.text or response.reason_phrase


class PostsClient:
    def __init__(
        self,
        session: Session,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._logger = Logger(utc=True)
        self._session = session
        self._client = httpx.AsyncClient(
            base_url=session.base_url,
            headers=session.headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "PostsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_draft(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", BASE_PATH, json=payload)

    async def update_draft(
        self, post_id: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request("PUT", f"{BASE_PATH}/{post_id}/draft", json=payload)

    async def update_post(self, post_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"{BASE_PATH}/{post_id}", json=fields)

    async def publish(
        self, payload: dict[str, Any], post_id: str | None = None
    ) -> dict[str, Any]:
        body = {**payload, "id": post_id} if post_id else payload
        return await self._request("POST", f"{BASE_PATH}/publish", json=body)

    async def set_status(self, post_id: str, status: str) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"{BASE_PATH}/{post_id}/status", json={"status": status}
        )

    async def delete_post(self, post_id: str) -> None:
        await self._request("DELETE", f"{BASE_PATH}/{post_id}")

    async def get_post(self, post_id: str) -> dict[str, Any]:
        return await self._request("GET", f"{BASE_PATH}/{post_id}")

    async def get_published_posts(self) -> list[dict[str, Any]]:
        return await self._request("GET", BASE_PATH, params={"status": "published"})

    async def get_my_posts(self) -> dict[str, list[dict[str, Any]]]:
        return await self._request("GET", f"{BASE_PATH}/mine")

    async def get_drafts(self) -> list[dict[str, Any]]:
        return await self._request("GET", f"{BASE_PATH}/drafts")

    async def get_posts_by_tag(self, tag: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"{BASE_PATH}/tag/{quote(tag, safe='')}")

    async def get_tags(self) -> list[str]:
        return await self._request("GET", f"{BASE_PATH}/tags")

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        self._logger.debug(f"Sending {method=} {url=}")
        try:
            response = await self._client.request(method, url, **kwargs)
        except HTTPError as exc:
            self._logger.exception("Unexpected error occurred", exc_info=exc)
            raise PostsClientException(str(exc)) from exc
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                self._logger.warning(
                    f"Response body is not JSON {method=} {url=}",
                    status_code=response.status_code,
                )
                raise PostsClientException(
                    "Unexpected response from the server",
                    status_code=response.status_code,
                ) from exc
        message = _error_message(response)
        self._logger.warning(
            f"Request failed {method=} {url=}",
            status_code=response.status_code,
            error_message=message,
        )
        raise PostsClientException(message, status_code=response.status_code)
