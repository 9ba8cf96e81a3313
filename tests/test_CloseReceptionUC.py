from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from pvz_service.domain.errors import NoOpenReceptionError, NoProductsToDeleteError, ErrorCode
from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Reception, Product, ProductPK
from pvz_service.domain.use_cases.external.pvz import CloseReceptionUC, CloseReceptionUCRq, DeleteLastProductUC, \
    DeleteLastProductUCRq

PVZ_ID = uuid4()
RECEPTION = Reception(id=uuid4(), pvz_id=PVZ_ID, date_time=datetime(2025, 4, 9, 9, 0, 0))


class Entering:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        pass


@pytest.fixture
def mock_transaction_manager() -> MagicMock:
    manager = MagicMock()
    manager.create = MagicMock(side_effect=lambda *args, **kwargs: Entering())
    return manager


# ---------------------------------------------------------------------------
# Close Reception
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_reception_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_open_by_pvz_id = AsyncMock(return_value=RECEPTION)
    repo.update_status = AsyncMock(return_value=RECEPTION.model_copy(update={"status": ReceptionStatus.CLOSED}))
    return repo


@pytest.mark.asyncio
async def test_close_open_reception(mock_transaction_manager, mock_reception_repo):
    uc = CloseReceptionUC(mock_transaction_manager, mock_reception_repo)

    response = await uc.apply(CloseReceptionUCRq(pvz_id=PVZ_ID))

    assert response.success is True
    assert response.reception.status == ReceptionStatus.CLOSED
    assert mock_reception_repo.update_status.call_args[0][:2] == (RECEPTION.id, ReceptionStatus.CLOSED)


@pytest.mark.asyncio
async def test_close_without_open_reception(mock_transaction_manager, mock_reception_repo):
    mock_reception_repo.find_open_by_pvz_id.side_effect = NoOpenReceptionError()
    uc = CloseReceptionUC(mock_transaction_manager, mock_reception_repo)

    response = await uc.apply(CloseReceptionUCRq(pvz_id=PVZ_ID))

    assert response.success is False
    assert response.error_code == ErrorCode.RECEPTION_NOT_FOUND
    mock_reception_repo.update_status.assert_not_awaited()


# ---------------------------------------------------------------------------
# Delete Last Product
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_product_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_last_in_open_reception = AsyncMock(
        return_value=Product(id=uuid4(), reception_id=RECEPTION.id, type="shoes", date_time=datetime(2025, 4, 9))
    )
    repo.delete = AsyncMock(return_value=True)
    return repo


@pytest.mark.asyncio
async def test_delete_exactly_the_last_product(mock_transaction_manager, mock_product_repo):
    uc = DeleteLastProductUC(mock_transaction_manager, mock_product_repo)
    last_product = mock_product_repo.find_last_in_open_reception.return_value

    response = await uc.apply(DeleteLastProductUCRq(pvz_id=PVZ_ID))

    assert response.success is True
    assert response.deleted_product == last_product
    deleted_pk: ProductPK = mock_product_repo.delete.call_args[0][0]
    assert deleted_pk.id == last_product.id


@pytest.mark.asyncio
async def test_delete_without_products(mock_transaction_manager, mock_product_repo):
    mock_product_repo.find_last_in_open_reception.side_effect = NoProductsToDeleteError()
    uc = DeleteLastProductUC(mock_transaction_manager, mock_product_repo)

    response = await uc.apply(DeleteLastProductUCRq(pvz_id=PVZ_ID))

    assert response.error_code == ErrorCode.NO_PRODUCTS_TO_DELETE
    mock_product_repo.delete.assert_not_awaited()
