from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError
from pydantic import ValidationError

from pvz_service.domain.errors import UnauthorizedError
from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.schemas.user import TokenClaims
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.security import TokenService


class JoseTokenService(TokenService):

    def __init__(self, secret_key: str, algorithm: str = "HS256", token_expiry_minutes: int = 60):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._token_expiry = timedelta(minutes=token_expiry_minutes)

    def generate_token(self, user_id: str, role: UserRole) -> str:
        claims = {
            "user_id": str(user_id),
            "role": role.value,
            "exp": datetime.now(timezone.utc) + self._token_expiry,
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def parse_token(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
            return TokenClaims(user_id=payload["user_id"], role=payload["role"])
        except (JWTError, KeyError, ValidationError) as e:
            logger.info("token rejected: error=%s", e)
            raise UnauthorizedError("invalid token") from e
