import uuid

from boto3.dynamodb.conditions import Attr

from app.models.post import Post, PostStatus
from app.repositories.post_repository import PostRepository

LARGE_SIZED_POST_LENGTH = 20_000
NUMBER_OF_LARGE_SIZED_POSTS = 80


class TestPostRepository:
    def test_successfully_create_draft(
        self, owner: str, post_repository: PostRepository, posts_table
    ):
        item = post_repository.create_post(
            {
                "owner": owner,
                "title": "Hello",
                "content": "World",
                "tags": ["tech"],
                "status": PostStatus.DRAFT.value,
            }
        )

        stored = posts_table.get_item(Key={"id": item["id"]})["Item"]
        assert stored == item
        assert item["created_at"] == item["updated_at"]
        assert item["read_time"] == 1
        assert "published_at" not in item

    def test_successfully_create_published_post(
        self, owner: str, post_repository: PostRepository
    ):
        item = post_repository.create_post(
            {
                "owner": owner,
                "title": "Hello",
                "content": "World",
                "tags": [],
                "status": PostStatus.PUBLISHED.value,
            }
        )

        assert item["published_at"] == item["created_at"]

    def test_create_post_assigns_new_id(
        self, owner: str, post_repository: PostRepository
    ):
        data = {
            "id": "client-chosen",
            "owner": owner,
            "title": "Hello",
            "content": "World",
            "status": PostStatus.DRAFT.value,
        }

        item = post_repository.create_post(data)

        assert item["id"] != "client-chosen"
        uuid.UUID(item["id"])

    def test_successfully_get_post_by_uuid(
        self, posts: list[Post], post_repository: PostRepository
    ):
        item = post_repository.get_post_by_uuid(posts[0].id)

        assert posts[0] == Post(**item)

    def test_fail_to_get_post_by_uuid(self, post_repository: PostRepository):
        assert post_repository.get_post_by_uuid(str(uuid.uuid4())) is None

    def test_successfully_get_posts_by_owner(
        self, owner: str, posts: list[Post], post_repository: PostRepository
    ):
        items = post_repository.get_posts_by_owner(owner)

        assert {post.id for post in posts if post.owner == owner} == {
            item["id"] for item in items
        }
        updated = [item["updated_at"] for item in items]
        assert updated == sorted(updated, reverse=True)

    def test_successfully_get_posts_by_owner_and_status(
        self, owner: str, posts: list[Post], post_repository: PostRepository
    ):
        items = post_repository.get_posts_by_owner(owner, PostStatus.DRAFT.value)

        assert len(items) == 2
        assert all(item["owner"] == owner for item in items)
        assert all(item["status"] == PostStatus.DRAFT.value for item in items)

    def test_successfully_get_posts_by_status_ordered_by_published_at(
        self, published_posts: list[Post], post_repository: PostRepository
    ):
        items = post_repository.get_posts_by_status(PostStatus.PUBLISHED.value)

        assert len(items) == len(published_posts)
        published = [item["published_at"] for item in items]
        assert published == sorted(published, reverse=True)

    def test_successfully_get_posts_by_status_ordered_by_updated_at(
        self, posts: list[Post], post_repository: PostRepository
    ):
        items = post_repository.get_posts_by_status(
            PostStatus.DRAFT.value, order_by="updated_at"
        )

        assert len(items) == 3
        updated = [item["updated_at"] for item in items]
        assert updated == sorted(updated, reverse=True)

    def test_successfully_get_posts_by_tag(self, post_repository: PostRepository):
        items = post_repository.get_posts_by_tag("web", PostStatus.PUBLISHED.value)

        assert len(items) == 2
        assert all("web" in item["tags"] for item in items)

    def test_get_posts_by_tag_matches_whole_tags_only(
        self, post_repository: PostRepository
    ):
        assert post_repository.get_posts_by_tag("we", PostStatus.PUBLISHED.value) == []

    def test_successfully_get_distinct_tags(self, post_repository: PostRepository):
        tags = post_repository.get_distinct_tags(PostStatus.PUBLISHED.value)

        assert tags == ["aws", "python", "web"]

    def test_successfully_get_posts_using_last_evaluated_key(
        self,
        faker,
        make_post,
        owner: str,
        post_repository: PostRepository,
        posts_table,
    ):
        with posts_table.batch_writer() as batch:
            for _ in range(NUMBER_OF_LARGE_SIZED_POSTS):
                post = make_post(owner)
                post.content = faker.text(LARGE_SIZED_POST_LENGTH)
                batch.put_item(Item=post.model_dump(mode="json", exclude_none=True))

        items = post_repository.get_posts_by_owner(owner)

        assert len(items) == NUMBER_OF_LARGE_SIZED_POSTS + 4

    def test_successfully_update_post(
        self, posts: list[Post], post_repository: PostRepository
    ):
        content = " ".join(["word"] * 401)

        item = post_repository.update_post(posts[0].id, {"content": content})

        assert item["content"] == content
        assert item["read_time"] == 3
        assert item["updated_at"] > posts[0].updated_at
        assert item["title"] == posts[0].title

    def test_update_post_sets_published_at_on_first_publication(
        self, posts: list[Post], post_repository: PostRepository
    ):
        draft = posts[3]

        item = post_repository.update_post(
            draft.id, {"status": PostStatus.PUBLISHED.value}
        )

        assert item["status"] == PostStatus.PUBLISHED.value
        assert item["published_at"] == item["updated_at"]

    def test_update_post_keeps_existing_published_at(
        self, posts: list[Post], post_repository: PostRepository
    ):
        post = posts[0]

        post_repository.update_post(post.id, {"status": PostStatus.DRAFT.value})
        item = post_repository.update_post(
            post.id, {"status": PostStatus.PUBLISHED.value}
        )

        assert item["published_at"] == post.published_at

    def test_update_post_returns_none_for_missing_post(
        self, post_repository: PostRepository, posts_table
    ):
        post_uuid = str(uuid.uuid4())

        assert post_repository.update_post(post_uuid, {"title": "Ghost"}) is None
        assert "Item" not in posts_table.get_item(Key={"id": post_uuid})

    def test_update_post_returns_none_when_condition_fails(
        self, other_owner: str, posts: list[Post], post_repository: PostRepository
    ):
        item = post_repository.update_post(
            posts[0].id, {"title": "Hijacked"}, Attr("owner").eq(other_owner)
        )

        assert item is None
        assert post_repository.get_post_by_uuid(posts[0].id)["title"] == posts[0].title

    def test_successfully_delete_post(
        self, posts: list[Post], post_repository: PostRepository
    ):
        assert post_repository.delete_post(posts[0].id) is True
        assert post_repository.get_post_by_uuid(posts[0].id) is None

    def test_fail_to_delete_missing_post(self, post_repository: PostRepository):
        assert post_repository.delete_post(str(uuid.uuid4())) is False
