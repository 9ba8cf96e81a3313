from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from freezegun import freeze_time

from pvz_service.domain.errors import NoOpenReceptionError, OpenReceptionExistsError, InternalError, ErrorCode, \
    INTERNAL_ERROR_MESSAGE
from pvz_service.domain.schemas.enums import ReceptionStatus
from pvz_service.domain.schemas.pvz import Reception
from pvz_service.domain.use_cases.external.pvz import CreateReceptionUC, CreateReceptionUCRq
from pvz_service.ports.outbound.repo.transaction import IsolationLevel, AccessMode

# ---------------------------------------------------------------------------
# Fixtures & Helpers
# ---------------------------------------------------------------------------

FROZEN_NOW = datetime(2025, 4, 9, 12, 0, 0)
PVZ_ID = uuid4()


class Entering:
    def __init__(self):
        self.exc_type = None
        self.exited = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited = True
        self.exc_type = exc_type


@pytest.fixture
def transaction() -> Entering:
    return Entering()


@pytest.fixture
def mock_transaction_manager(transaction) -> MagicMock:
    manager = MagicMock()
    manager.create = MagicMock(return_value=transaction)
    return manager


@pytest.fixture
def mock_reception_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_open_by_pvz_id = AsyncMock(side_effect=NoOpenReceptionError())
    repo.create = AsyncMock(side_effect=lambda reception, transaction: reception.model_copy(update={"id": uuid4()}))
    return repo


@pytest.fixture
def mock_metrics() -> MagicMock:
    return MagicMock()


@pytest.fixture
def create_reception_uc(mock_transaction_manager, mock_reception_repo, mock_metrics) -> CreateReceptionUC:
    return CreateReceptionUC(mock_transaction_manager, mock_reception_repo, mock_metrics)


# ---------------------------------------------------------------------------
# 1. No open reception: a new one is created in a read-committed transaction
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@freeze_time(FROZEN_NOW)
async def test_creates_reception_with_current_time(create_reception_uc, mock_transaction_manager,
                                                   mock_reception_repo, mock_metrics, transaction):
    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID))

    assert response.success is True
    assert response.reception.date_time == FROZEN_NOW
    assert response.reception.status == ReceptionStatus.IN_PROGRESS
    assert response.reception.pvz_id == PVZ_ID

    mock_transaction_manager.create.assert_called_once_with(IsolationLevel.READ_COMMITTED, AccessMode.READ_WRITE)
    mock_reception_repo.find_open_by_pvz_id.assert_awaited_once_with(PVZ_ID, transaction)
    created: Reception = mock_reception_repo.create.call_args[0][0]
    assert mock_reception_repo.create.call_args[0][1] is transaction
    assert created.id is None
    mock_metrics.reception_created.assert_called_once()
    assert transaction.exited and transaction.exc_type is None


@pytest.mark.asyncio
async def test_uses_given_date_time(create_reception_uc, mock_reception_repo):
    date_time = datetime(2025, 4, 1, 8, 30)

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID, date_time=date_time))

    assert response.reception.date_time == date_time


@pytest.mark.asyncio
async def test_aware_date_time_is_converted_to_local_time(create_reception_uc, mock_reception_repo):
    date_time = datetime(2025, 4, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=3)))

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID, date_time=date_time))

    created: Reception = mock_reception_repo.create.call_args[0][0]
    assert created.date_time.tzinfo is None
    assert created.date_time == date_time.astimezone().replace(tzinfo=None)
    assert response.reception.date_time == created.date_time


# ---------------------------------------------------------------------------
# 2. Open reception exists: nothing is inserted, the transaction is rolled back
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_open_reception_exists(create_reception_uc, mock_reception_repo, mock_metrics, transaction):
    mock_reception_repo.find_open_by_pvz_id.side_effect = None
    mock_reception_repo.find_open_by_pvz_id.return_value = Reception(id=uuid4(), pvz_id=PVZ_ID,
                                                                     date_time=FROZEN_NOW)

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID))

    assert response.success is False
    assert response.error_code == ErrorCode.OPEN_RECEPTION_EXISTS
    mock_reception_repo.create.assert_not_awaited()
    mock_metrics.reception_created.assert_not_called()
    assert transaction.exc_type is OpenReceptionExistsError


@pytest.mark.asyncio
async def test_lost_race_on_insert(create_reception_uc, mock_reception_repo, mock_metrics):
    mock_reception_repo.create.side_effect = OpenReceptionExistsError()

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID))

    assert response.error_code == ErrorCode.OPEN_RECEPTION_EXISTS
    mock_metrics.reception_created.assert_not_called()


# ---------------------------------------------------------------------------
# 3. Lookup failure other than "no open reception" propagates
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_lookup_failure_is_internal_error(create_reception_uc, mock_reception_repo, transaction):
    mock_reception_repo.find_open_by_pvz_id.side_effect = InternalError()

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID))

    assert response.success is False
    assert response.error_code == ErrorCode.INTERNAL_ERROR
    assert response.error == INTERNAL_ERROR_MESSAGE
    mock_reception_repo.create.assert_not_awaited()
    assert transaction.exc_type is InternalError


@pytest.mark.asyncio
async def test_unexpected_error_is_hidden(create_reception_uc, mock_reception_repo):
    mock_reception_repo.create.side_effect = RuntimeError("connection reset by peer")

    response = await create_reception_uc.apply(CreateReceptionUCRq(pvz_id=PVZ_ID))

    assert response.error_code == ErrorCode.INTERNAL_ERROR
    assert "connection reset" not in response.error
