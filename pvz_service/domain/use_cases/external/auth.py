from datetime import datetime
from typing import Optional

from pvz_service.domain.errors import InvalidRoleError, UserAlreadyExistsError, NotFoundError, \
    InvalidCredentialsError
from pvz_service.domain.schemas.allowed import AllowedValues
from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.schemas.user import User
from pvz_service.domain.use_cases.abstract import UseCase, UCRequest, UCResponse, log_failure
from pvz_service.ports.outbound.repo.transaction import TransactionManager, IsolationLevel, AccessMode
from pvz_service.ports.outbound.repo.user import UserRepo
from pvz_service.ports.outbound.security import PasswordHasher, TokenService

DUMMY_USER_ID = "dummyID"


def as_allowed_role(role: str, allowed: AllowedValues) -> UserRole:
    """ Роль из запроса, если она разрешена настройками и известна сервису """
    normalized = role.strip().lower()
    if not allowed.is_role_allowed(normalized) or normalized not in {r.value for r in UserRole}:
        raise InvalidRoleError(f"role '{role}' is not allowed")
    return UserRole(normalized)


# ---------------------------------------------------------------------------
# Register Use Case
# ---------------------------------------------------------------------------


class RegisterUCRq(UCRequest):
    email: str
    password: str
    role: str


class RegisterUCRs(UCResponse):
    request: RegisterUCRq
    user: Optional[User] = None


class RegisterUC(UseCase):

    def __init__(self,
                 transaction_manager: TransactionManager,
                 user_repo: UserRepo,
                 password_hasher: PasswordHasher,
                 allowed: AllowedValues):
        self._transaction_manager = transaction_manager
        self._user_repo = user_repo
        self._password_hasher = password_hasher
        self._allowed = allowed

    async def apply(self, request: RegisterUCRq) -> RegisterUCRs:
        try:
            role = as_allowed_role(request.role, self._allowed)
            password_hash = await self._password_hasher.hash(request.password)
            async with self._transaction_manager.create(IsolationLevel.READ_COMMITTED,
                                                        AccessMode.READ_WRITE) as transaction:
                try:
                    await self._user_repo.find_by_email(request.email, transaction)
                except NotFoundError:
                    pass
                else:
                    raise UserAlreadyExistsError()
                user = User(email=request.email,
                            password_hash=password_hash,
                            role=role,
                            created_at=datetime.now())
                created_user = await self._user_repo.create(user, transaction)
        except Exception as e:
            log_failure("register", e, email=request.email, role=request.role)
            return RegisterUCRs.failed(request, e)
        return RegisterUCRs(success=True, request=request, user=created_user)


# ---------------------------------------------------------------------------
# Login Use Cases
# ---------------------------------------------------------------------------


class LoginUCRq(UCRequest):
    email: str
    password: str


class TokenUCRs(UCResponse):
    token: Optional[str] = None


class LoginUCRs(TokenUCRs):
    request: LoginUCRq


class LoginUC(UseCase):
    """ Выдаёт токен по email и паролю. Неизвестный email и неверный пароль неразличимы для клиента """

    def __init__(self, user_repo: UserRepo, password_hasher: PasswordHasher, token_service: TokenService):
        self._user_repo = user_repo
        self._password_hasher = password_hasher
        self._token_service = token_service

    async def apply(self, request: LoginUCRq) -> LoginUCRs:
        try:
            try:
                user = await self._user_repo.find_by_email(request.email)
            except NotFoundError as e:
                raise InvalidCredentialsError() from e
            if not await self._password_hasher.check(request.password, user.password_hash):
                raise InvalidCredentialsError()
            token = self._token_service.generate_token(str(user.id), user.role)
        except Exception as e:
            log_failure("login", e, email=request.email)
            return LoginUCRs.failed(request, e)
        return LoginUCRs(success=True, request=request, token=token)


class DummyLoginUCRq(UCRequest):
    role: str


class DummyLoginUCRs(TokenUCRs):
    request: DummyLoginUCRq


class DummyLoginUC(UseCase):
    """ Токен для указанной роли без учётной записи пользователя """

    def __init__(self, token_service: TokenService, allowed: AllowedValues):
        self._token_service = token_service
        self._allowed = allowed

    async def apply(self, request: DummyLoginUCRq) -> DummyLoginUCRs:
        try:
            role = as_allowed_role(request.role, self._allowed)
            token = self._token_service.generate_token(DUMMY_USER_ID, role)
        except Exception as e:
            log_failure("dummy login", e, role=request.role)
            return DummyLoginUCRs.failed(request, e)
        return DummyLoginUCRs(success=True, request=request, token=token)
