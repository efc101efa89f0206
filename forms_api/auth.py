import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from passlib.context import CryptContext

from .config import ACCESS_TOKEN_EXPIRE_HOURS, BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_SECRET
from .errors import Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The caller of an operation. ``id`` is None for anonymous callers."""

    id: Optional[int] = None
    email: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return self.id is None


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None or identity.is_anonymous:
        raise Unauthorized()
    return identity


class AuthGate:
    """
    Password hashing, token issuance and token resolution.

    Tokens are stateless HS256 JWTs carrying the user id and email. There is
    no server-side session, so a token stays valid until it expires.
    """

    def __init__(
        self,
        secret_key: str = JWT_SECRET,
        algorithm: str = JWT_ALGORITHM,
        token_ttl: timedelta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS),
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_ttl = token_ttl
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def issue_token(self, user_id: int, email: str, now: Optional[datetime] = None) -> Tuple[str, datetime]:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.token_ttl
        payload = {
            "sub": str(user_id),
            "userId": user_id,
            "email": email,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def resolve(self, token: Optional[str]) -> Identity:
        """
        Turns a raw token or an ``Authorization`` header value into an
        Identity. Never raises: anything unusable resolves to anonymous.
        """
        if not token:
            return Identity.anonymous()

        parts = token.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]
        elif len(parts) != 1:
            logger.info("Ignoring malformed authorization value")
            return Identity.anonymous()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.info("Token has expired, continuing as anonymous")
            return Identity.anonymous()
        except jwt.PyJWTError as exc:
            logger.info("Invalid token (%s), continuing as anonymous", exc.__class__.__name__)
            return Identity.anonymous()

        user_id = payload.get("userId", payload.get("sub"))
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            logger.info("Token payload without usable user id")
            return Identity.anonymous()
        return Identity(id=user_id, email=payload.get("email"))
