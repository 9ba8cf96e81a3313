import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Optional, List, Dict, Type, AsyncIterator

from pydantic import BaseModel
from sqlalchemy import update, select, or_, ColumnElement, and_, asc, desc, insert, delete
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.operators import eq, ge, le

from pvz_service.adapters.outbound.repo.sa.base import Base
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.errors import AppError, InternalError
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.repo.abstract import Repo, TDomain, TPK
from pvz_service.ports.outbound.repo.fields import FilterFieldsDNF, PaginationQuery, UpdateFields, \
    FilterFieldsConjunct, FilterField, ConditionOperation
from pvz_service.ports.outbound.repo.transaction import Transaction


class AbstractSARepo(Repo, ABC):

    def __init__(self, transaction_manager: SATransactionManager, model_class: Type[Base]):
        self._transaction_manager = transaction_manager
        self._model_class = model_class

    @abstractmethod
    def to_model(self, obj: BaseModel) -> Base:
        """ Метод для конвертации объекта домена в модель хранения """
        pass

    @abstractmethod
    def to_domain(self, obj: Base) -> BaseModel:
        """ Метод для конвертации модели хранения в объект домена """
        pass

    @abstractmethod
    def pk_to_model_pk(self, pk: BaseModel) -> Dict:
        """ Метод для конвертации первичного ключа доменной модели в первичный ключ модели хранения """
        pass

    def integrity_error_as_app_error(self, e: IntegrityError) -> Optional[AppError]:
        """ Доменная ошибка для нарушения ограничения целостности. None - ошибка инфраструктурная """
        return None

    @property
    def _table_name(self) -> str:
        return self._model_class.__tablename__

    @asynccontextmanager
    async def executor(self,
                       operation: str,
                       transaction: Optional[Transaction] = None,
                       **context) -> AsyncIterator[AsyncSession]:
        """
        Сессия для выполнения запроса: сессия транзакции или сессия из пула.
        Ошибки SQLAlchemy логируются с контекстом и превращаются в доменные ошибки,
        текст ошибки хранилища наружу не передаётся.
        """
        started_at = time.perf_counter()
        success = False
        try:
            async with self._transaction_manager.get_executor(transaction) as session:
                yield session
            success = True
        except IntegrityError as e:
            app_error = self.integrity_error_as_app_error(e)
            if app_error is None:
                logger.error("%s failed: table=%s, context=%s, error=%s", operation, self._table_name, context, e)
                raise InternalError() from e
            logger.info("%s rejected by constraint: table=%s, context=%s, code=%s",
                        operation, self._table_name, context, app_error.code.value)
            raise app_error from e
        except SQLAlchemyError as e:
            logger.error("%s failed: table=%s, context=%s, error=%s", operation, self._table_name, context, e)
            raise InternalError() from e
        finally:
            self._observe(operation, time.perf_counter() - started_at, success)

    def _observe(self, operation: str, duration_seconds: float, success: bool) -> None:
        metrics = self._transaction_manager.database_metrics
        if metrics is not None:
            metrics.observe_query(self._table_name, operation, duration_seconds, success)

    async def create(self,
                     obj: TDomain,
                     transaction: Optional[Transaction] = None) -> TDomain:
        obj_model = self.to_model(obj)
        query = (insert(self._model_class)
                 .values(obj_model.to_dict())
                 .returning(self._model_class))
        async with self.executor("create", transaction) as session:
            result = await session.scalars(query)
            created_model = result.one()
        return self.to_domain(created_model)

    async def update(self,
                     obj_pk: TPK,
                     fields: UpdateFields,
                     transaction: Optional[Transaction] = None) -> Optional[TDomain]:
        model_pk = self.pk_to_model_pk(obj_pk)
        query = update(self._model_class).filter_by(**model_pk).values(fields.to_dict()).returning(self._model_class)
        async with self.executor("update", transaction, **model_pk) as session:
            result = await session.scalars(query)
            updated_model = result.first()
        if updated_model:
            return self.to_domain(updated_model)

    async def delete(self,
                     obj_pk: TPK,
                     transaction: Optional[Transaction] = None) -> bool:
        model_pk = self.pk_to_model_pk(obj_pk)
        query = delete(self._model_class).filter_by(**model_pk)
        async with self.executor("delete", transaction, **model_pk) as session:
            result = await session.execute(query)
        return result.rowcount > 0

    async def get(self,
                  obj_pk: TPK,
                  transaction: Optional[Transaction] = None) -> Optional[TDomain]:
        model_pk = self.pk_to_model_pk(obj_pk)
        query = select(self._model_class).filter_by(**model_pk)
        async with self.executor("get", transaction, **model_pk) as session:
            result = await session.scalars(query)
            model = result.first()
        if model:
            return self.to_domain(model)

    async def get_all(self,
                      transaction: Optional[Transaction] = None) -> List[TDomain]:
        query = select(self._model_class)
        async with self.executor("get_all", transaction) as session:
            result = await session.scalars(query)
            models = result.all()
        return [self.to_domain(model) for model in models]

    async def paginated(self,
                        pagination_query: PaginationQuery,
                        transaction: Optional[Transaction] = None) -> List[TDomain]:
        query = paginated_query(select(self._model_class), pagination_query, self._model_class)
        async with self.executor("paginated", transaction) as session:
            result = await session.scalars(query)
            models = result.all()
        return [self.to_domain(model) for model in models]


def paginated_query(query, pagination_query: PaginationQuery, model_class: Type[Base]):
    if pagination_query.filter_fields_dnf:
        sqlalchemy_dnf = filter_fields_dnf_as_sqlalchemy_dnf(pagination_query.filter_fields_dnf, model_class)
        query = query.where(sqlalchemy_dnf)
    order_columns = []
    if pagination_query.order_by:
        order_columns.append(pagination_query.order_by)
    order_columns.extend(pagination_query.then_order_by)
    for order_column_name in order_columns:
        order_column = getattr(model_class, order_column_name)
        if pagination_query.asc_sort:
            query = query.order_by(asc(order_column))
        else:
            query = query.order_by(desc(order_column))
    if pagination_query.limit_per_page:
        query = query.limit(pagination_query.limit_per_page)
    if pagination_query.offset_page:
        query = query.offset(pagination_query.offset_page)
    return query


def filter_fields_dnf_as_sqlalchemy_dnf(filter_fields_dnf: FilterFieldsDNF, model_class: Type[Base]) -> ColumnElement:
    conjunctions = [conjunct_as_sqlalchemy_conjunct(conjunct, model_class) for conjunct in
                    filter_fields_dnf.conjunctions]
    dnf = or_(*conjunctions)
    return dnf


def conjunct_as_sqlalchemy_conjunct(conjunct: FilterFieldsConjunct, model_class: Type[Base]) -> ColumnElement:
    literals = [filter_field_as_sqlalchemy_literal(filter_field, model_class) for filter_field in conjunct.group]
    conj = and_(*literals)
    return conj


def filter_field_as_sqlalchemy_literal(filter_field: FilterField, model_class: Type[Base]) -> ColumnElement:
    column: ColumnElement = getattr(model_class, filter_field.name)
    if filter_field.operation == ConditionOperation.EQ:
        return eq(column, filter_field.value)
    if filter_field.operation == ConditionOperation.GTE:
        return ge(column, filter_field.value)
    if filter_field.operation == ConditionOperation.LTE:
        return le(column, filter_field.value)
    raise RuntimeError(f"Unknown operation type: {filter_field.operation}")
