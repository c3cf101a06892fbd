import uuid

from pydantic import BaseModel, Field

X_CORRELATION_ID = "X-Correlation-ID"


class Session(BaseModel):
    """Connection details of one signed-in editor.

    Passed explicitly to every client instead of living in global state.
    """

    base_url: str
    token: str | None = None
    correlation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def headers(self) -> dict[str, str]:
        headers = {X_CORRELATION_ID: self.correlation_id}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers
