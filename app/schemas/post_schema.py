from pydantic import field_validator

from app.models.camel_model import CamelModel
from app.utils import normalize_tags


class CreatePost(CamelModel):
    title: str
    content: str
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return normalize_tags(value)


class PublishPost(CreatePost):
    id: str | None = None


class UpdatePost(CamelModel):
    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        return None if value is None else normalize_tags(value)


class UpdateStatus(CamelModel):
    status: str
