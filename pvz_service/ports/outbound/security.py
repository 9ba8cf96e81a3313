from abc import ABC, abstractmethod

from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.schemas.user import TokenClaims


class PasswordHasher(ABC):

    @abstractmethod
    async def hash(self, password: str) -> str:
        """ Хэш пароля. Вычисление не блокирует event loop. При ошибке поднимает PasswordHashingError """
        pass

    @abstractmethod
    async def check(self, password: str, password_hash: str) -> bool:
        pass


class TokenService(ABC):

    @abstractmethod
    def generate_token(self, user_id: str, role: UserRole) -> str:
        pass

    @abstractmethod
    def parse_token(self, token: str) -> TokenClaims:
        """ Проверяет подпись и срок действия токена. При ошибке поднимает UnauthorizedError """
        pass
