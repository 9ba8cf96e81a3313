from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict
from starlette.requests import Request

from pvz_service.domain.errors import UnauthorizedError, ForbiddenError
from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.schemas.user import TokenClaims
from pvz_service.domain.use_cases.external.auth import DummyLoginUC, RegisterUC, LoginUC
from pvz_service.domain.use_cases.external.pvz import CreatePvzUC, CreateReceptionUC, AddProductUC, \
    DeleteLastProductUC, CloseReceptionUC, GetPvzsInfoUC, GetPvzsInfoOptimizedUC, GetPvzListUC
from pvz_service.ports.outbound.metrics import BusinessMetrics, DatabaseMetrics
from pvz_service.ports.outbound.security import TokenService


class RestUseCases(BaseModel):
    """ Сценарии, доступные через REST API """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    dummy_login: DummyLoginUC
    register_user: RegisterUC
    login: LoginUC
    create_pvz: CreatePvzUC
    create_reception: CreateReceptionUC
    add_product: AddProductUC
    delete_last_product: DeleteLastProductUC
    close_reception: CloseReceptionUC
    get_pvzs_info: GetPvzsInfoUC
    get_pvzs_info_optimized: GetPvzsInfoOptimizedUC
    get_pvz_list: GetPvzListUC


bearer_scheme = HTTPBearer(auto_error=False)


def get_use_cases(request: Request) -> RestUseCases:
    return request.app.state.use_cases


def get_metrics(request: Request) -> BusinessMetrics:
    return request.app.state.metrics


def get_database_metrics(request: Request) -> Optional[DatabaseMetrics]:
    return request.app.state.database_metrics


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def require_roles(*roles: UserRole):
    """ Зависимость маршрута: проверяет токен и пропускает только перечисленные роли """

    async def check_role(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
                         token_service: TokenService = Depends(get_token_service)) -> TokenClaims:
        if credentials is None:
            raise UnauthorizedError("missing token")
        claims = token_service.parse_token(credentials.credentials)
        if claims.role not in roles:
            raise ForbiddenError(f"access denied, allowed roles: {', '.join(role.value for role in roles)}")
        return claims

    return check_role
