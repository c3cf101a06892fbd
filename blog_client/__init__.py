from blog_client.autosave import (
    AutosaveCoordinator,
    AutosaveState,
    DraftPayload,
    SaveStatus,
)
from blog_client.exceptions import PostsClientException
from blog_client.posts_client import PostsClient
from blog_client.session import Session

__all__ = [
    "AutosaveCoordinator",
    "AutosaveState",
    "DraftPayload",
    "PostsClient",
    "PostsClientException",
    "SaveStatus",
    "Session",
]
