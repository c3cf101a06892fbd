from typing import Any

from pydantic import BaseModel


class JWTToken(BaseModel):
    exp: int
    iat: int
    iss: str | None = None
    jti: str | None = None
    sub: str
    user: dict[str, Any] | None = None

    @property
    def owner(self) -> str:
        return self.sub
