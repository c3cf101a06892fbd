import pendulum
import pytest

from app.jwt_bearer import JWTBearer
from app.models.auth import JWTToken
from app.repositories.post_repository import PostRepository
from app.services.post_service import PostService


@pytest.fixture
def jwt_bearer() -> JWTBearer:
    return JWTBearer()


@pytest.fixture
def jwt_token(faker, owner: str) -> JWTToken:
    now = pendulum.now()
    return JWTToken(
        exp=now.add(years=1).int_timestamp,
        iat=now.int_timestamp,
        iss="https://blog.example.com",
        jti=faker.uuid4(),
        sub=owner,
    )


@pytest.fixture
def post_repository(initialize_posts_table) -> PostRepository:
    return PostRepository()


@pytest.fixture
def post_service(initialize_posts_table) -> PostService:
    return PostService()
