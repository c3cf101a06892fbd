import uuid
from random import randint

import boto3
import pendulum
import pytest
from moto import mock_aws

from app.models.post import Post, PostStatus
from app.settings import Settings
from app.utils import compute_read_time


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def owner(faker) -> str:
    return faker.uuid4()


@pytest.fixture
def other_owner(faker) -> str:
    return faker.uuid4()


@pytest.fixture
def dynamodb_resource(settings: Settings):
    with mock_aws():
        yield boto3.Session().resource(
            "dynamodb",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )


@pytest.fixture
def posts_table(dynamodb_resource):
    return dynamodb_resource.Table("test-posts")


@pytest.fixture
def initialize_posts_table(dynamodb_resource, posts: list[Post], posts_table):
    dynamodb_resource.create_table(
        AttributeDefinitions=[
            {"AttributeName": "id", "AttributeType": "S"},
            {"AttributeName": "owner", "AttributeType": "S"},
            {"AttributeName": "status", "AttributeType": "S"},
        ],
        TableName="test-posts",
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "OwnerIndex",
                "KeySchema": [{"AttributeName": "owner", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            },
            {
                "IndexName": "StatusIndex",
                "KeySchema": [{"AttributeName": "status", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    with posts_table.batch_writer() as batch:
        for post in posts:
            batch.put_item(Item=post.model_dump(mode="json", exclude_none=True))


@pytest.fixture
def make_post(faker):
    def make(
        owner: str,
        status: PostStatus = PostStatus.PUBLISHED,
        tags: list[str] | None = None,
    ) -> Post:
        created_at = pendulum.now("UTC").subtract(minutes=randint(1, 10_000))
        content = faker.text()
        return Post(
            id=str(uuid.uuid4()),
            owner=owner,
            title=faker.sentence(),
            content=content,
            tags=faker.words(randint(1, 4)) if tags is None else tags,
            status=status,
            created_at=created_at.to_iso8601_string(),
            updated_at=created_at.to_iso8601_string(),
            published_at=(
                created_at.to_iso8601_string()
                if status == PostStatus.PUBLISHED
                else None
            ),
            read_time=compute_read_time(content),
        )

    return make


@pytest.fixture
def posts(make_post, owner: str, other_owner: str) -> list[Post]:
    return [
        make_post(owner, tags=["python", "web"]),
        make_post(owner, tags=["python"]),
        make_post(owner, PostStatus.DRAFT, tags=["python", "secret"]),
        make_post(owner, PostStatus.DRAFT),
        make_post(other_owner, tags=["aws", "web"]),
        make_post(other_owner, PostStatus.DRAFT, tags=["hidden"]),
    ]


@pytest.fixture
def published_posts(posts: list[Post]) -> list[Post]:
    return [post for post in posts if post.status == PostStatus.PUBLISHED]
