from enum import Enum

from app.models.camel_model import CamelModel


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Post(CamelModel):
    id: str
    owner: str
    title: str
    content: str
    tags: list[str] = []
    status: PostStatus = PostStatus.DRAFT
    created_at: str
    updated_at: str
    published_at: str | None = None
    read_time: int = 0

    @property
    def is_draft(self) -> bool:
        return self.status == PostStatus.DRAFT

    def is_owned_by(self, owner: str | None) -> bool:
        return owner is not None and self.owner == owner
