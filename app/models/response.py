from app.models.camel_model import CamelModel
from app.models.post import Post


class OwnerPosts(CamelModel):
    drafts: list[Post]
    published: list[Post]
