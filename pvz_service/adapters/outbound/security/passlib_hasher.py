import asyncio

from passlib.context import CryptContext

from pvz_service.domain.errors import PasswordHashingError
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.security import PasswordHasher


class PasslibPasswordHasher(PasswordHasher):
    """ bcrypt через passlib. Хэширование выполняется в пуле потоков, event loop не блокируется """

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    async def hash(self, password: str) -> str:
        try:
            return await asyncio.to_thread(self._context.hash, password)
        except (ValueError, TypeError) as e:
            logger.error("failed to hash password: error=%s", e)
            raise PasswordHashingError() from e

    async def check(self, password: str, password_hash: str) -> bool:
        try:
            return await asyncio.to_thread(self._context.verify, password, password_hash)
        except (ValueError, TypeError) as e:
            # Повреждённый хэш в хранилище считаем несовпадением пароля
            logger.warning("failed to verify password: error=%s", e)
            return False
