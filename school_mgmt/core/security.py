# school_mgmt/core/security.py

import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from school_mgmt.core.config import Settings, settings as default_settings
from school_mgmt.core.logging import logger


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=default_settings.BCRYPT_ROUNDS
)


def get_password_hash(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or foreign hash in storage
        return False


class TokenHandler:
    """
    Issues and verifies the two token kinds.

    Refresh (long) tokens are signed with LONG_TOKEN_SECRET, access (short)
    tokens with SHORT_TOKEN_SECRET, so one can never stand in for the other.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def _secret_for(self, token_type: TokenType) -> str:
        if token_type == TokenType.REFRESH:
            return self.config.LONG_TOKEN_SECRET
        return self.config.SHORT_TOKEN_SECRET

    def create_token(
        self,
        data: Dict[str, Any],
        token_type: TokenType,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT token with specified type and expiration"""
        to_encode = data.copy()

        if expires_delta is None:
            if token_type == TokenType.REFRESH:
                expires_delta = timedelta(days=self.config.REFRESH_TOKEN_EXPIRE_DAYS)
            else:
                expires_delta = timedelta(minutes=self.config.ACCESS_TOKEN_EXPIRE_MINUTES)

        now = datetime.now(timezone.utc)
        to_encode.update({
            "iat": now,
            "exp": now + expires_delta,
            "iss": self.config.TOKEN_ISSUER,
            "type": token_type.value,
            "jti": secrets.token_urlsafe(16)
        })

        return jwt.encode(
            to_encode,
            self._secret_for(token_type),
            algorithm=self.config.ALGORITHM
        )

    def create_access_token(self, user_id: int, role: str, school_id: Optional[int] = None) -> str:
        """Create access token carrying the principal"""
        data = {
            "sub": str(user_id),
            "role": role,
            "school_id": school_id
        }
        return self.create_token(data, TokenType.ACCESS)

    def create_refresh_token(self, user_id: int) -> str:
        """Create refresh token with user ID"""
        return self.create_token({"sub": str(user_id)}, TokenType.REFRESH)

    def decode_token(self, token: str, token_type: TokenType) -> Optional[Dict[str, Any]]:
        """
        Verify a token and its type.

        Returns the payload, or None when the token is malformed, expired,
        signed with the wrong secret or of another type.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_for(token_type),
                algorithms=[self.config.ALGORITHM],
                issuer=self.config.TOKEN_ISSUER
            )
        except JWTError as e:
            logger.debug(f"Token verification failed: {str(e)}")
            return None

        if payload.get("type") != token_type.value or not payload.get("sub"):
            return None
        return payload
