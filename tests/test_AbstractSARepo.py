from datetime import datetime
from typing import Optional, Dict

import pytest
from pydantic import BaseModel
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import mapped_column, Mapped

from pvz_service.adapters.outbound.repo.sa.abstract import AbstractSARepo
from pvz_service.adapters.outbound.repo.sa.base import Base, TablenameMixin
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.domain.errors import InternalError
from pvz_service.ports.outbound.repo.fields import (
    FilterFieldsDNF,
    FilterFieldsConjunct,
    FilterField,
    ConditionOperation,
    PaginationQuery,
    UpdateFields, UpdateField
)


# === Test Models ===

class CourierModel(Base, TablenameMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class CourierDomain(BaseModel):
    id: Optional[int] = None
    name: str
    email: str
    age: int
    created_at: Optional[datetime] = None


class CourierPK(BaseModel):
    id: int

    def __eq__(self, other):
        return isinstance(other, CourierPK) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


# === Test Repository ===

class CourierRepo(AbstractSARepo):
    def __init__(self, transaction_manager: SATransactionManager):
        super().__init__(transaction_manager, CourierModel)

    def to_model(self, obj: CourierDomain) -> CourierModel:
        return CourierModel(id=obj.id, name=obj.name, email=obj.email, age=obj.age, created_at=obj.created_at)

    def to_domain(self, obj: CourierModel) -> CourierDomain:
        return CourierDomain(
            id=obj.id,
            name=obj.name,
            email=obj.email,
            age=obj.age,
            created_at=obj.created_at
        )

    def pk_to_model_pk(self, pk: CourierPK) -> Dict:
        return {"id": pk.id}


# === Fixtures ===

@pytest.fixture
def courier_repo(transaction_manager):
    return CourierRepo(transaction_manager)


@pytest.fixture
def sample_courier():
    return CourierDomain(
        name="John Doe",
        email="john@example.com",
        age=30,
        created_at=datetime(2024, 1, 1)
    )


async def _create_all(repo: CourierRepo, couriers):
    return [await repo.create(courier) for courier in couriers]


# === Integration Tests ===

class TestCreateIntegration:
    @pytest.mark.asyncio
    async def test_create_success(self, courier_repo, sample_courier):
        result = await courier_repo.create(sample_courier)

        assert result is not None
        assert result.id is not None
        assert result.name == "John Doe"
        assert result.email == "john@example.com"
        assert result.age == 30

    @pytest.mark.asyncio
    async def test_create_duplicate_email_is_internal_error(self, courier_repo):
        await courier_repo.create(CourierDomain(name="User1", email="same@test.com", age=25))

        # Нарушение ограничения без доменного смысла: наружу уходит только общая ошибка
        with pytest.raises(InternalError) as exc_info:
            await courier_repo.create(CourierDomain(name="User2", email="same@test.com", age=30))
        assert "UNIQUE" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_with_transaction_commit(self, courier_repo, transaction_manager):
        async with transaction_manager.create() as transaction:
            result = await courier_repo.create(CourierDomain(name="Trans", email="trans@test.com", age=25),
                                               transaction=transaction)

        retrieved = await courier_repo.get(CourierPK(id=result.id))
        assert retrieved is not None
        assert retrieved.name == "Trans"

    @pytest.mark.asyncio
    async def test_create_with_transaction_rollback(self, courier_repo, transaction_manager):
        transaction = transaction_manager.create()
        await transaction.begin()
        result = await courier_repo.create(CourierDomain(name="Rollback", email="rollback@test.com", age=25),
                                           transaction=transaction)
        await transaction.rollback()
        await transaction.close()

        assert await courier_repo.get(CourierPK(id=result.id)) is None


class TestUpdateIntegration:
    @pytest.mark.asyncio
    async def test_update_success(self, courier_repo):
        courier = await courier_repo.create(CourierDomain(name="Original", email="original@test.com", age=25))

        fields = UpdateFields(group=[UpdateField(name="name", value="Updated"), UpdateField(name="age", value=35)])
        updated = await courier_repo.update(CourierPK(id=courier.id), fields)

        assert updated is not None
        assert updated.name == "Updated"
        assert updated.age == 35
        assert updated.email == "original@test.com"  # Не изменился

    @pytest.mark.asyncio
    async def test_update_not_found(self, courier_repo):
        result = await courier_repo.update(CourierPK(id=99999), UpdateFields.single("name", "Ghost"))

        assert result is None


class TestDeleteIntegration:
    @pytest.mark.asyncio
    async def test_delete_success(self, courier_repo):
        courier = await courier_repo.create(CourierDomain(name="Temp", email="temp@test.com", age=25))

        assert await courier_repo.delete(CourierPK(id=courier.id)) is True
        assert await courier_repo.get(CourierPK(id=courier.id)) is None

    @pytest.mark.asyncio
    async def test_delete_not_found(self, courier_repo):
        assert await courier_repo.delete(CourierPK(id=99999)) is False


class TestGetIntegration:
    @pytest.mark.asyncio
    async def test_get_success(self, courier_repo):
        created = await courier_repo.create(CourierDomain(name="John", email="john@test.com", age=30))

        retrieved = await courier_repo.get(CourierPK(id=created.id))

        assert retrieved is not None
        assert retrieved.id == created.id
        assert retrieved.name == "John"

    @pytest.mark.asyncio
    async def test_get_not_found(self, courier_repo):
        assert await courier_repo.get(CourierPK(id=99999)) is None

    @pytest.mark.asyncio
    async def test_get_all_multiple(self, courier_repo):
        await _create_all(courier_repo, [
            CourierDomain(name="User1", email="u1@test.com", age=20),
            CourierDomain(name="User2", email="u2@test.com", age=25),
            CourierDomain(name="User3", email="u3@test.com", age=30)
        ])

        result = await courier_repo.get_all()

        assert {u.name for u in result} == {"User1", "User2", "User3"}


class TestPaginatedFilterIntegration:
    @pytest.mark.asyncio
    async def test_filter_range(self, courier_repo):
        await _create_all(courier_repo, [
            CourierDomain(name="Young", email="young@test.com", age=20),
            CourierDomain(name="Middle", email="middle@test.com", age=30),
            CourierDomain(name="Old", email="old@test.com", age=40)
        ])

        # Возраст >= 25 AND <= 35
        filter_dnf = FilterFieldsDNF.single_conjunct([
            FilterField(name="age", operation=ConditionOperation.GTE, value=25),
            FilterField(name="age", operation=ConditionOperation.LTE, value=35)
        ])

        result = await courier_repo.paginated(PaginationQuery(filter_fields_dnf=filter_dnf))

        assert [u.name for u in result] == ["Middle"]

    @pytest.mark.asyncio
    async def test_filter_or_condition(self, courier_repo):
        await _create_all(courier_repo, [
            CourierDomain(name="Alice", email="alice@test.com", age=25),
            CourierDomain(name="Bob", email="bob@test.com", age=30),
            CourierDomain(name="Charlie", email="charlie@test.com", age=35)
        ])

        # name = "Alice" OR age = 35
        filter_dnf = FilterFieldsDNF(
            conjunctions=[
                FilterFieldsConjunct(
                    group=[FilterField(name="name", operation=ConditionOperation.EQ, value="Alice")]
                ),
                FilterFieldsConjunct(
                    group=[FilterField(name="age", operation=ConditionOperation.EQ, value=35)]
                )
            ]
        )

        result = await courier_repo.paginated(PaginationQuery(filter_fields_dnf=filter_dnf))

        assert {u.name for u in result} == {"Alice", "Charlie"}


class TestPaginatedIntegration:
    @pytest.mark.asyncio
    async def test_paginated_orders_with_tie_break(self, courier_repo):
        created = await _create_all(courier_repo, [
            CourierDomain(name=f"User{i}", email=f"u{i}@test.com", age=30 if i % 2 else 20) for i in range(1, 6)
        ])

        query = PaginationQuery.page(1, 3, order_by="age", then_order_by=["id"], asc_sort=True)
        first_page = await courier_repo.paginated(query)
        query = PaginationQuery.page(2, 3, order_by="age", then_order_by=["id"], asc_sort=True)
        second_page = await courier_repo.paginated(query)

        expected = sorted(created, key=lambda u: (u.age, u.id))
        assert [u.id for u in first_page] == [u.id for u in expected[:3]]
        assert [u.id for u in second_page] == [u.id for u in expected[3:]]

    @pytest.mark.asyncio
    async def test_paginated_with_filter(self, courier_repo):
        await _create_all(courier_repo, [
            CourierDomain(name="A", email="a@test.com", age=20),
            CourierDomain(name="B", email="b@test.com", age=30),
            CourierDomain(name="C", email="c@test.com", age=40)
        ])

        query = PaginationQuery(order_by="age",
                                asc_sort=False,
                                filter_fields_dnf=FilterFieldsDNF.single("age", 25, ConditionOperation.GTE))
        result = await courier_repo.paginated(query)

        assert [u.name for u in result] == ["C", "B"]
