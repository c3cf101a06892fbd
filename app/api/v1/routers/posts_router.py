from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status

from app.jwt_bearer import JWTBearer
from app.models.auth import JWTToken
from app.models.post import Post
from app.models.response import OwnerPosts
from app.schemas.post_schema import CreatePost, PublishPost, UpdatePost, UpdateStatus
from app.services.post_service import PostService

jwt_bearer = JWTBearer()
optional_jwt_bearer = JWTBearer(auto_error=False)
post_service = PostService()
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_draft(
    create_model: CreatePost,
    response: Response,
    token: JWTToken = Depends(jwt_bearer),
) -> Post:
    post = post_service.create_draft(token.owner, create_model.model_dump())
    response.headers["Location"] = f"/api/v1/posts/{post.id}"
    return post


@router.post("/publish", status_code=status.HTTP_200_OK)
def publish_post(
    publish_model: PublishPost, token: JWTToken = Depends(jwt_bearer)
) -> Post:
    return post_service.publish_post(token.owner, publish_model.model_dump())


@router.get("/mine", status_code=status.HTTP_200_OK)
def get_my_posts(token: JWTToken = Depends(jwt_bearer)) -> OwnerPosts:
    return post_service.get_owner_posts(token.owner)


@router.get("/drafts", status_code=status.HTTP_200_OK)
def get_drafts(token: JWTToken = Depends(jwt_bearer)) -> list[Post]:
    return post_service.get_drafts(token.owner)


@router.get("/tags", status_code=status.HTTP_200_OK)
def get_tags() -> list[str]:
    return post_service.get_tags()


@router.get("/tag/{tag}", status_code=status.HTTP_200_OK)
def get_posts_by_tag(tag: str) -> list[Post]:
    return post_service.get_posts_by_tag(tag)


@router.get("", status_code=status.HTTP_200_OK)
def get_posts(
    post_status: Literal["published"] = Query("published", alias="status")
) -> list[Post]:
    return post_service.get_published_posts()


@router.get("/{uuid}", status_code=status.HTTP_200_OK)
def get_post_by_uuid(
    uuid: str, token: JWTToken | None = Depends(optional_jwt_bearer)
) -> Post:
    return post_service.get_post(uuid, token.owner if token else None)


@router.put("/{uuid}/draft", status_code=status.HTTP_200_OK)
def update_draft(
    update_model: CreatePost, uuid: str, token: JWTToken = Depends(jwt_bearer)
) -> Post:
    return post_service.update_draft(uuid, token.owner, update_model.model_dump())


@router.patch("/{uuid}", status_code=status.HTTP_200_OK)
def update_post(
    update_model: UpdatePost, uuid: str, token: JWTToken = Depends(jwt_bearer)
) -> Post:
    return post_service.update_fields(
        uuid, token.owner, update_model.model_dump(exclude_none=True)
    )


@router.patch("/{uuid}/status", status_code=status.HTTP_200_OK)
def update_status(
    status_model: UpdateStatus, uuid: str, token: JWTToken = Depends(jwt_bearer)
) -> Post:
    return post_service.set_status(uuid, token.owner, status_model.status)


@router.delete("/{uuid}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(uuid: str, token: JWTToken = Depends(jwt_bearer)):
    post_service.delete_post(uuid, token.owner)
