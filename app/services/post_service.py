from typing import Any

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Attr

from app.exceptions import (
    DraftNotFoundException,
    InvalidStatusException,
    PostForbiddenException,
    PostNotFoundException,
    PostValidationException,
)
from app.models.post import Post, PostStatus
from app.models.response import OwnerPosts
from app.repositories.post_repository import PostRepository
from app.utils import normalize_tags

TITLE_MAX_LENGTH = 100
EDITABLE_FIELDS = ("title", "content", "tags")


class PostService:
    ERROR_CONTENT_REQUIRED = "Content is required"
    ERROR_DRAFT_NOT_FOUND = "Draft not found or you don't have permission to edit it"
    ERROR_INVALID_STATUS = "Invalid status"
    ERROR_NOT_OWNER = "Not authorized to modify this post"
    ERROR_POST_NOT_FOUND = "The requested post was not found"
    ERROR_TITLE_REQUIRED = "Title is required"
    ERROR_TITLE_TOO_LONG = f"Title cannot be more than {TITLE_MAX_LENGTH} characters"
    ERROR_VIEW_DRAFT = "Not authorized to view this draft"

    def __init__(self):
        self._logger = Logger(utc=True)
        self._repo = PostRepository()

    def create_draft(self, owner: str, data: dict[str, Any]) -> Post:
        return self._create(owner, data, PostStatus.DRAFT)

    def create_published(self, owner: str, data: dict[str, Any]) -> Post:
        return self._create(owner, data, PostStatus.PUBLISHED)

    def publish_post(self, owner: str, data: dict[str, Any]) -> Post:
        post_uuid = data.get("id")
        if not post_uuid:
            return self.create_published(owner, data)
        self._get_owned_post(post_uuid, owner)
        fields = self._validated_fields(data, partial=False)
        return self._update(
            post_uuid, {**fields, "status": PostStatus.PUBLISHED.value}
        )

    def update_draft(self, post_uuid: str, owner: str, data: dict[str, Any]) -> Post:
        fields = self._validated_fields(data, partial=False)
        item = self._repo.update_post(
            post_uuid,
            fields,
            Attr("owner").eq(owner) & Attr("status").eq(PostStatus.DRAFT.value),
        )
        if item is None:
            self._logger.warning(f"Draft not updatable {post_uuid=} {owner=}")
            raise DraftNotFoundException(self.ERROR_DRAFT_NOT_FOUND)
        self._logger.info(f"Draft saved {post_uuid=}")
        return Post(**item)

    def update_fields(self, post_uuid: str, owner: str, data: dict[str, Any]) -> Post:
        post = self._get_owned_post(post_uuid, owner)
        fields = self._validated_fields(data, partial=True)
        if not fields:
            return post
        return self._update(post_uuid, fields)

    def set_status(self, post_uuid: str, owner: str, status: str) -> Post:
        try:
            new_status = PostStatus(status)
        except ValueError:
            self._logger.warning(f"Rejected status change {post_uuid=} {status=}")
            raise InvalidStatusException(self.ERROR_INVALID_STATUS)
        self._get_owned_post(post_uuid, owner)
        return self._update(post_uuid, {"status": new_status.value})

    def delete_post(self, post_uuid: str, owner: str):
        self._get_owned_post(post_uuid, owner)
        if not self._repo.delete_post(post_uuid):
            raise PostNotFoundException(self.ERROR_POST_NOT_FOUND)
        self._logger.info(f"Post deleted: {post_uuid=}")

    def get_post(self, post_uuid: str, caller: str | None = None) -> Post:
        post = self._get_post_by_uuid(post_uuid)
        if post.is_draft and not post.is_owned_by(caller):
            self._logger.warning(f"Draft requested by non-owner {post_uuid=} {caller=}")
            raise PostForbiddenException(self.ERROR_VIEW_DRAFT)
        return post

    def get_published_posts(self) -> list[Post]:
        items = self._repo.get_posts_by_status(PostStatus.PUBLISHED.value)
        return [Post(**item) for item in items]

    def get_owner_posts(self, owner: str) -> OwnerPosts:
        posts = [Post(**item) for item in self._repo.get_posts_by_owner(owner)]
        return OwnerPosts(
            drafts=[post for post in posts if post.is_draft],
            published=[post for post in posts if not post.is_draft],
        )

    def get_drafts(self, owner: str) -> list[Post]:
        items = self._repo.get_posts_by_owner(owner, PostStatus.DRAFT.value)
        return [Post(**item) for item in items]

    def get_posts_by_tag(self, tag: str) -> list[Post]:
        items = self._repo.get_posts_by_tag(tag.strip(), PostStatus.PUBLISHED.value)
        return [Post(**item) for item in items]

    def get_tags(self) -> list[str]:
        return self._repo.get_distinct_tags(PostStatus.PUBLISHED.value)

    def _create(self, owner: str, data: dict[str, Any], status: PostStatus) -> Post:
        fields = self._validated_fields(data, partial=False)
        item = self._repo.create_post(
            {**fields, "owner": owner, "status": status.value}
        )
        self._logger.info(f"Post created: {item['id']=} {status=}")
        return Post(**item)

    def _update(self, post_uuid: str, fields: dict[str, Any]) -> Post:
        item = self._repo.update_post(post_uuid, fields)
        if item is None:
            # deleted between the ownership check and the write
            raise PostNotFoundException(self.ERROR_POST_NOT_FOUND)
        self._logger.info(f"Post updated: {post_uuid=} {list(fields)=}")
        return Post(**item)

    def _get_post_by_uuid(self, post_uuid: str) -> Post:
        item = self._repo.get_post_by_uuid(post_uuid)
        if not item:
            self._logger.warning(f"Post not found: {post_uuid=}")
            raise PostNotFoundException(self.ERROR_POST_NOT_FOUND)
        return Post(**item)

    def _get_owned_post(self, post_uuid: str, owner: str) -> Post:
        post = self._get_post_by_uuid(post_uuid)
        if not post.is_owned_by(owner):
            self._logger.warning(f"Rejected non-owner {owner=} for {post_uuid=}")
            raise PostForbiddenException(self.ERROR_NOT_OWNER)
        return post

    def _validated_fields(self, data: dict[str, Any], partial: bool) -> dict[str, Any]:
        fields = {
            k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None
        }
        if "title" in fields or not partial:
            title = (fields.get("title") or "").strip()
            if not title:
                raise PostValidationException(self.ERROR_TITLE_REQUIRED)
            if len(title) > TITLE_MAX_LENGTH:
                raise PostValidationException(self.ERROR_TITLE_TOO_LONG)
            fields["title"] = title
        if "content" in fields or not partial:
            if not (fields.get("content") or "").strip():
                raise PostValidationException(self.ERROR_CONTENT_REQUIRED)
        if "tags" in fields or not partial:
            fields["tags"] = normalize_tags(fields.get("tags"))
        return fields
