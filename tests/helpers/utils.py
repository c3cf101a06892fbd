import uuid

import jwt
import pendulum


def generate_jwt_token(jwt_secret: str, owner: str, exp: int = 1) -> str:
    iat = pendulum.now()
    return jwt.encode(
        {
            "exp": iat.add(hours=exp).int_timestamp,
            "iat": iat.int_timestamp,
            "jti": str(uuid.uuid4()),
            "sub": owner,
        },
        jwt_secret,
        algorithm="HS256",
    )


def auth_header(jwt_secret: str, owner: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {generate_jwt_token(jwt_secret, owner)}"}
