from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from pvz_service.domain.errors import InvalidCityError, InvalidProductTypeError, NoOpenReceptionError, \
    ReceptionNotFoundError, OpenReceptionExistsError
from pvz_service.domain.schemas.allowed import AllowedValues
from pvz_service.domain.schemas.annotations import LocalDatetime
from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Pvz, Reception, Product, PvzInfo, ReceptionInfo, ProductPK
from pvz_service.domain.use_cases.abstract import UseCase, UCRequest, UCResponse, log_failure
from pvz_service.ports.outbound.metrics import BusinessMetrics
from pvz_service.ports.outbound.repo.product import ProductRepo
from pvz_service.ports.outbound.repo.pvz import PvzRepo
from pvz_service.ports.outbound.repo.reception import ReceptionRepo
from pvz_service.ports.outbound.repo.transaction import TransactionManager, IsolationLevel, AccessMode, \
    Transaction


# ---------------------------------------------------------------------------
# Create Pvz Use Case
# ---------------------------------------------------------------------------


class CreatePvzUCRq(UCRequest):
    city: str


class CreatePvzUCRs(UCResponse):
    request: CreatePvzUCRq
    pvz: Optional[Pvz] = None


class CreatePvzUC(UseCase):
    """
    Регистрирует ПВЗ в одном из разрешённых городов.
    Отдельная транзакция не нужна: операция состоит из одной вставки.
    """

    def __init__(self, pvz_repo: PvzRepo, allowed: AllowedValues, metrics: BusinessMetrics):
        self._pvz_repo = pvz_repo
        self._allowed = allowed
        self._metrics = metrics

    async def apply(self, request: CreatePvzUCRq) -> CreatePvzUCRs:
        try:
            if not self._allowed.is_city_allowed(request.city):
                raise InvalidCityError()
            created_pvz = await self._pvz_repo.create(Pvz(city=request.city, registration_date=datetime.now()))
        except Exception as e:
            log_failure("create pvz", e, city=request.city)
            return CreatePvzUCRs.failed(request, e)
        self._metrics.pvz_created()
        return CreatePvzUCRs(success=True, request=request, pvz=created_pvz)


# ---------------------------------------------------------------------------
# Create Reception Use Case
# ---------------------------------------------------------------------------


class CreateReceptionUCRq(UCRequest):
    pvz_id: UUID
    date_time: Optional[LocalDatetime] = None


class CreateReceptionUCRs(UCResponse):
    request: CreateReceptionUCRq
    reception: Optional[Reception] = None


class CreateReceptionUC(UseCase):
    """
    Открывает приёмку на ПВЗ, если у него нет незакрытой.
    Проверка и вставка идут в одной транзакции, а гонку двух одновременных запросов
    разрешает частичный уникальный индекс: проигравшая вставка получает OPEN_RECEPTION_EXISTS.
    """

    def __init__(self,
                 transaction_manager: TransactionManager,
                 reception_repo: ReceptionRepo,
                 metrics: BusinessMetrics):
        self._transaction_manager = transaction_manager
        self._reception_repo = reception_repo
        self._metrics = metrics

    async def apply(self, request: CreateReceptionUCRq) -> CreateReceptionUCRs:
        try:
            async with self._transaction_manager.create(IsolationLevel.READ_COMMITTED,
                                                        AccessMode.READ_WRITE) as transaction:
                try:
                    await self._reception_repo.find_open_by_pvz_id(request.pvz_id, transaction)
                except NoOpenReceptionError:
                    pass
                else:
                    raise OpenReceptionExistsError()
                reception = Reception(pvz_id=request.pvz_id,
                                      date_time=request.date_time or datetime.now(),
                                      status=ReceptionStatus.IN_PROGRESS)
                created_reception = await self._reception_repo.create(reception, transaction)
        except Exception as e:
            log_failure("create reception", e, pvz_id=request.pvz_id)
            return CreateReceptionUCRs.failed(request, e)
        self._metrics.reception_created()
        return CreateReceptionUCRs(success=True, request=request, reception=created_reception)


# ---------------------------------------------------------------------------
# Add Product Use Case
# ---------------------------------------------------------------------------


class AddProductUCRq(UCRequest):
    pvz_id: UUID
    type: str


class AddProductUCRs(UCResponse):
    request: AddProductUCRq
    product: Optional[Product] = None


class AddProductUC(UseCase):
    """ Добавляет товар в незакрытую приёмку ПВЗ """

    def __init__(self,
                 transaction_manager: TransactionManager,
                 reception_repo: ReceptionRepo,
                 product_repo: ProductRepo,
                 allowed: AllowedValues,
                 metrics: BusinessMetrics):
        self._transaction_manager = transaction_manager
        self._reception_repo = reception_repo
        self._product_repo = product_repo
        self._allowed = allowed
        self._metrics = metrics

    async def apply(self, request: AddProductUCRq) -> AddProductUCRs:
        try:
            if not self._allowed.is_product_type_allowed(request.type):
                raise InvalidProductTypeError()
            async with self._transaction_manager.create(IsolationLevel.READ_COMMITTED,
                                                        AccessMode.READ_WRITE) as transaction:
                reception = await self._reception_repo.find_open_by_pvz_id(request.pvz_id, transaction)
                product = Product(reception_id=reception.id, type=request.type, date_time=datetime.now())
                created_product = await self._product_repo.create(product, transaction)
        except Exception as e:
            log_failure("add product", e, pvz_id=request.pvz_id, type=request.type)
            return AddProductUCRs.failed(request, e)
        self._metrics.product_added()
        return AddProductUCRs(success=True, request=request, product=created_product)


# ---------------------------------------------------------------------------
# Delete Last Product Use Case
# ---------------------------------------------------------------------------


class DeleteLastProductUCRq(UCRequest):
    pvz_id: UUID


class DeleteLastProductUCRs(UCResponse):
    request: DeleteLastProductUCRq
    deleted_product: Optional[Product] = None


class DeleteLastProductUC(UseCase):
    """ Удаляет последний добавленный товар незакрытой приёмки (строго LIFO) """

    def __init__(self, transaction_manager: TransactionManager, product_repo: ProductRepo):
        self._transaction_manager = transaction_manager
        self._product_repo = product_repo

    async def apply(self, request: DeleteLastProductUCRq) -> DeleteLastProductUCRs:
        try:
            async with self._transaction_manager.create(IsolationLevel.READ_COMMITTED,
                                                        AccessMode.READ_WRITE) as transaction:
                last_product = await self._product_repo.find_last_in_open_reception(request.pvz_id, transaction)
                await self._product_repo.delete(ProductPK(id=last_product.id), transaction)
        except Exception as e:
            log_failure("delete last product", e, pvz_id=request.pvz_id)
            return DeleteLastProductUCRs.failed(request, e)
        return DeleteLastProductUCRs(success=True, request=request, deleted_product=last_product)


# ---------------------------------------------------------------------------
# Close Reception Use Case
# ---------------------------------------------------------------------------


class CloseReceptionUCRq(UCRequest):
    pvz_id: UUID


class CloseReceptionUCRs(UCResponse):
    request: CloseReceptionUCRq
    reception: Optional[Reception] = None


class CloseReceptionUC(UseCase):
    """ Закрывает незакрытую приёмку ПВЗ. Повторный вызов вернёт RECEPTION_NOT_FOUND """

    def __init__(self, transaction_manager: TransactionManager, reception_repo: ReceptionRepo):
        self._transaction_manager = transaction_manager
        self._reception_repo = reception_repo

    async def apply(self, request: CloseReceptionUCRq) -> CloseReceptionUCRs:
        try:
            async with self._transaction_manager.create(IsolationLevel.READ_COMMITTED,
                                                        AccessMode.READ_WRITE) as transaction:
                try:
                    reception = await self._reception_repo.find_open_by_pvz_id(request.pvz_id, transaction)
                except NoOpenReceptionError as e:
                    raise ReceptionNotFoundError() from e
                closed_reception = await self._reception_repo.update_status(reception.id,
                                                                            ReceptionStatus.CLOSED,
                                                                            transaction)
        except Exception as e:
            log_failure("close reception", e, pvz_id=request.pvz_id)
            return CloseReceptionUCRs.failed(request, e)
        return CloseReceptionUCRs(success=True, request=request, reception=closed_reception)


# ---------------------------------------------------------------------------
# Get Pvzs Info Use Cases
# ---------------------------------------------------------------------------


class GetPvzsInfoUCRq(UCRequest):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    start_date: Optional[LocalDatetime] = None
    end_date: Optional[LocalDatetime] = None


class GetPvzsInfoUCRs(UCResponse):
    request: GetPvzsInfoUCRq
    pvzs: List[PvzInfo] = Field(default_factory=list)


class GetPvzsInfoUC(UseCase):
    """
    Страница ПВЗ с приёмками за период и товарами.
    Все запросы выполняются в одной читающей транзакции, чтобы дерево было согласованным.
    """

    def __init__(self,
                 transaction_manager: TransactionManager,
                 pvz_repo: PvzRepo,
                 reception_repo: ReceptionRepo,
                 product_repo: ProductRepo):
        self._transaction_manager = transaction_manager
        self._pvz_repo = pvz_repo
        self._reception_repo = reception_repo
        self._product_repo = product_repo

    async def _collect(self, request: GetPvzsInfoUCRq, transaction: Transaction) -> List[PvzInfo]:
        pvz_infos = []
        for pvz in await self._pvz_repo.get_page(request.page, request.limit, transaction):
            receptions = await self._reception_repo.get_by_pvz_id_filtered(pvz.id,
                                                                           request.start_date,
                                                                           request.end_date,
                                                                           transaction)
            reception_infos = []
            for reception in receptions:
                products = await self._product_repo.get_by_reception_id(reception.id, transaction)
                reception_infos.append(ReceptionInfo(reception=reception, products=products))
            pvz_infos.append(PvzInfo(pvz=pvz, receptions=reception_infos))
        return pvz_infos

    async def apply(self, request: GetPvzsInfoUCRq) -> GetPvzsInfoUCRs:
        try:
            pvz_infos = await self._transaction_manager.with_tx(IsolationLevel.READ_COMMITTED,
                                                                AccessMode.READ_ONLY,
                                                                lambda transaction: self._collect(request,
                                                                                                  transaction))
        except Exception as e:
            log_failure("get pvzs info", e, page=request.page, limit=request.limit)
            return GetPvzsInfoUCRs.failed(request, e)
        return GetPvzsInfoUCRs(success=True, request=request, pvzs=pvz_infos)


class GetPvzsInfoOptimizedUC(UseCase):
    """ То же дерево, что и GetPvzsInfoUC, одним запросом с соединениями """

    def __init__(self, pvz_repo: PvzRepo):
        self._pvz_repo = pvz_repo

    async def apply(self, request: GetPvzsInfoUCRq) -> GetPvzsInfoUCRs:
        try:
            pvz_infos = await self._pvz_repo.get_pvzs_with_receptions_and_products(request.page,
                                                                                   request.limit,
                                                                                   request.start_date,
                                                                                   request.end_date)
        except Exception as e:
            log_failure("get pvzs info optimized", e, page=request.page, limit=request.limit)
            return GetPvzsInfoUCRs.failed(request, e)
        return GetPvzsInfoUCRs(success=True, request=request, pvzs=pvz_infos)


# ---------------------------------------------------------------------------
# Get Pvz List Use Case
# ---------------------------------------------------------------------------


class GetPvzListUCRq(UCRequest):
    pass


class GetPvzListUCRs(UCResponse):
    request: GetPvzListUCRq
    pvzs: List[Pvz] = Field(default_factory=list)


class GetPvzListUC(UseCase):

    def __init__(self, pvz_repo: PvzRepo):
        self._pvz_repo = pvz_repo

    async def apply(self, request: GetPvzListUCRq) -> GetPvzListUCRs:
        try:
            pvzs = await self._pvz_repo.get_all()
        except Exception as e:
            log_failure("get pvz list", e)
            return GetPvzListUCRs.failed(request, e)
        return GetPvzListUCRs(success=True, request=request, pvzs=pvzs)
