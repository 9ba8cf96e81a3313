from typing import List, Optional, Dict, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from starlette import status
from starlette.responses import JSONResponse

from pvz_service.adapters.inbound.rest_api.dependencies import RestUseCases, get_use_cases, get_metrics, \
    get_database_metrics, require_roles
from pvz_service.adapters.inbound.rest_api.dto import DummyLoginRequest, TokenDTO, RegisterRequest, UserDTO, \
    LoginRequest, CreatePvzRequest, PvzDTO, PvzInfoDTO, CreateReceptionRequest, ReceptionDTO, AddProductRequest, \
    ProductDTO, MessageDTO, ErrorDTO
from pvz_service.domain.errors import ErrorKind, ErrorCode, kind_of, INTERNAL_ERROR_MESSAGE, NotFoundError
from pvz_service.domain.schemas.annotations import LocalDatetime
from pvz_service.domain.schemas.enums import UserRole
from pvz_service.domain.use_cases.abstract import UCResponse
from pvz_service.domain.use_cases.external.auth import DummyLoginUCRq, RegisterUCRq, LoginUCRq
from pvz_service.domain.use_cases.external.pvz import CreatePvzUCRq, GetPvzsInfoUCRq, GetPvzListUCRq, \
    CreateReceptionUCRq, AddProductUCRq, DeleteLastProductUCRq, CloseReceptionUCRq
from pvz_service.ports.outbound.metrics import BusinessMetrics, DatabaseMetrics

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EXPECTED_ABSENCE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INFRASTRUCTURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorDTO},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorDTO},
    status.HTTP_403_FORBIDDEN: {"model": ErrorDTO},
    status.HTTP_404_NOT_FOUND: {"model": ErrorDTO},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorDTO},
}

employee_only = require_roles(UserRole.EMPLOYEE)
moderator_only = require_roles(UserRole.MODERATOR)
employee_or_moderator = require_roles(UserRole.EMPLOYEE, UserRole.MODERATOR)

router = APIRouter(responses=ERROR_RESPONSES)


def error_response(code: ErrorCode, message: Optional[str]) -> JSONResponse:
    status_code = STATUS_BY_KIND[kind_of(code)]
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        message = INTERNAL_ERROR_MESSAGE
    content = ErrorDTO(code=code.value, message=message or INTERNAL_ERROR_MESSAGE).model_dump()
    return JSONResponse(content=content, status_code=status_code)


def failure_response(response: UCResponse) -> JSONResponse:
    return error_response(response.error_code or ErrorCode.INTERNAL_ERROR, response.error)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@router.post("/dummyLogin", response_model=TokenDTO, tags=["auth"])
async def dummy_login(body: DummyLoginRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.dummy_login.apply(DummyLoginUCRq(role=body.role))
    if not response.success:
        return failure_response(response)
    return TokenDTO(token=response.token)


@router.post("/register", response_model=UserDTO, status_code=status.HTTP_201_CREATED, tags=["auth"])
async def register(body: RegisterRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.register_user.apply(RegisterUCRq(email=body.email,
                                                                password=body.password,
                                                                role=body.role))
    if not response.success:
        return failure_response(response)
    return UserDTO.from_domain(response.user)


@router.post("/login", response_model=TokenDTO, tags=["auth"])
async def login(body: LoginRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.login.apply(LoginUCRq(email=body.email, password=body.password))
    if not response.success:
        return failure_response(response)
    return TokenDTO(token=response.token)


# ---------------------------------------------------------------------------
# Pvz
# ---------------------------------------------------------------------------


@router.post("/pvz", response_model=PvzDTO, status_code=status.HTTP_201_CREATED, tags=["pvz"],
             dependencies=[Depends(moderator_only)])
async def create_pvz(body: CreatePvzRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.create_pvz.apply(CreatePvzUCRq(city=body.city))
    if not response.success:
        return failure_response(response)
    return PvzDTO.from_domain(response.pvz)


def pvzs_info_request(page: int = Query(ge=1),
                      limit: int = Query(ge=1),
                      start_date: Optional[LocalDatetime] = Query(default=None, alias="startDate"),
                      end_date: Optional[LocalDatetime] = Query(default=None, alias="endDate")) -> GetPvzsInfoUCRq:
    return GetPvzsInfoUCRq(page=page, limit=limit, start_date=start_date, end_date=end_date)


@router.get("/pvz", response_model=List[PvzInfoDTO], tags=["pvz"],
            dependencies=[Depends(employee_or_moderator)])
async def get_pvzs_info(request: GetPvzsInfoUCRq = Depends(pvzs_info_request),
                        use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.get_pvzs_info.apply(request)
    if not response.success:
        return failure_response(response)
    return [PvzInfoDTO.from_domain(pvz_info) for pvz_info in response.pvzs]


@router.get("/pvz/optimized", response_model=List[PvzInfoDTO], tags=["pvz"],
            dependencies=[Depends(employee_or_moderator)])
async def get_pvzs_info_optimized(request: GetPvzsInfoUCRq = Depends(pvzs_info_request),
                                  use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.get_pvzs_info_optimized.apply(request)
    if not response.success:
        return failure_response(response)
    return [PvzInfoDTO.from_domain(pvz_info) for pvz_info in response.pvzs]


@router.get("/pvz/list", response_model=List[PvzDTO], tags=["pvz"],
            dependencies=[Depends(employee_or_moderator)])
async def get_pvz_list(use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.get_pvz_list.apply(GetPvzListUCRq())
    if not response.success:
        return failure_response(response)
    return [PvzDTO.from_domain(pvz) for pvz in response.pvzs]


@router.post("/pvz/{pvz_id}/delete_last_product", response_model=MessageDTO, tags=["pvz"],
             dependencies=[Depends(employee_only)])
async def delete_last_product(pvz_id: UUID, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.delete_last_product.apply(DeleteLastProductUCRq(pvz_id=pvz_id))
    if not response.success:
        return failure_response(response)
    return MessageDTO(message="product deleted successfully")


@router.post("/pvz/{pvz_id}/close_last_reception", response_model=ReceptionDTO, tags=["pvz"],
             dependencies=[Depends(employee_only)])
async def close_last_reception(pvz_id: UUID, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.close_reception.apply(CloseReceptionUCRq(pvz_id=pvz_id))
    if not response.success:
        return failure_response(response)
    return ReceptionDTO.from_domain(response.reception)


# ---------------------------------------------------------------------------
# Receptions and products
# ---------------------------------------------------------------------------


@router.post("/receptions", response_model=ReceptionDTO, status_code=status.HTTP_201_CREATED, tags=["receptions"],
             dependencies=[Depends(employee_only)])
async def create_reception(body: CreateReceptionRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.create_reception.apply(CreateReceptionUCRq(pvz_id=body.pvz_id,
                                                                          date_time=body.date_time))
    if not response.success:
        return failure_response(response)
    return ReceptionDTO.from_domain(response.reception)


@router.post("/products", response_model=ProductDTO, status_code=status.HTTP_201_CREATED, tags=["products"],
             dependencies=[Depends(employee_only)])
async def add_product(body: AddProductRequest, use_cases: RestUseCases = Depends(get_use_cases)):
    response = await use_cases.add_product.apply(AddProductUCRq(pvz_id=body.pvz_id, type=body.type))
    if not response.success:
        return failure_response(response)
    return ProductDTO.from_domain(response.product)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


@router.get("/metrics", response_model=Dict[str, int], tags=["metrics"])
async def get_business_metrics(metrics: BusinessMetrics = Depends(get_metrics)):
    return metrics.snapshot()


@router.get("/metrics/db", response_model=Dict[str, Any], tags=["metrics"])
async def get_database_metrics_snapshot(metrics: Optional[DatabaseMetrics] = Depends(get_database_metrics)):
    if metrics is None:
        raise NotFoundError("database metrics are disabled")
    return metrics.snapshot()
