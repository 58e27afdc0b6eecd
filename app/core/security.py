"""
Password hashing and session token signing.

Tokens are HS256 JWTs carrying ``userId``, ``email`` and ``type`` (``user`` or
``admin``). Verification fails closed: any problem yields ``valid=False``.
"""

from datetime import datetime, timedelta, timezone
import uuid
from typing import Literal, Optional
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict, Field

from app.config.settings import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TokenType = Literal["user", "admin"]


class TokenPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    type: TokenType
    iat: Optional[int] = None
    exp: Optional[int] = None


class TokenValidationResult(BaseModel):
    valid: bool
    payload: Optional[TokenPayload] = None
    error: Optional[str] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(subject_id: str, email: str, token_type: TokenType = "user") -> str:
    """Sign a token that expires after ``session_ttl_hours``."""
    now = datetime.now(timezone.utc)
    claims = {
        "userId": subject_id,
        "email": email,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=settings.session_ttl_hours)).timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        # Two logins within the same second must still get distinct tokens
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.get_jwt_secret(), algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str]) -> TokenValidationResult:
    if not token:
        return TokenValidationResult(valid=False, error="Invalid token")
    try:
        claims = jwt.decode(
            token,
            settings.get_jwt_secret(),
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
        return TokenValidationResult(valid=True, payload=TokenPayload(**claims))
    except ExpiredSignatureError:
        return TokenValidationResult(valid=False, error="Token expired")
    except JWTError:
        return TokenValidationResult(valid=False, error="Invalid token")
    except Exception as e:
        # Signature was fine but the claims do not fit TokenPayload
        logger.warning(f"Rejected token with unexpected claims: {e}")
        return TokenValidationResult(valid=False, error="Invalid token")
