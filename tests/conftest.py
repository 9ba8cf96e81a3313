import pytest
import pytest_asyncio

from pvz_service.adapters.outbound.metrics.counter import CounterBusinessMetrics
from pvz_service.adapters.outbound.repo.sa.database import Database
from pvz_service.adapters.outbound.repo.sa.impls.product import SAProductRepo
from pvz_service.adapters.outbound.repo.sa.impls.pvz import SAPvzRepo
from pvz_service.adapters.outbound.repo.sa.impls.reception import SAReceptionRepo
from pvz_service.adapters.outbound.repo.sa.impls.user import SAUserRepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.adapters.outbound.security.jose_token_service import JoseTokenService
from pvz_service.adapters.outbound.security.passlib_hasher import PasslibPasswordHasher
from pvz_service.domain.schemas.allowed import AllowedValues
from pvz_service.domain.use_cases.external.auth import RegisterUC, LoginUC, DummyLoginUC
from pvz_service.domain.use_cases.external.pvz import CreatePvzUC, CreateReceptionUC, AddProductUC, \
    DeleteLastProductUC, CloseReceptionUC, GetPvzsInfoUC, GetPvzsInfoOptimizedUC, GetPvzListUC

TEST_SECRET_KEY = "test-secret"


@pytest_asyncio.fixture
async def sqlite_database(tmp_path):
    """Создаёт SQLite базу во временном файле: все соединения пула видят одни данные"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'pvz.db'}")
    await db.start()

    yield db

    await db.stop()


@pytest.fixture
def database(sqlite_database):
    return sqlite_database


@pytest.fixture
def transaction_manager(database):
    return SATransactionManager(database)


@pytest.fixture
def sa_pvz_repo(transaction_manager):
    return SAPvzRepo(transaction_manager)


@pytest.fixture
def sa_reception_repo(transaction_manager):
    return SAReceptionRepo(transaction_manager)


@pytest.fixture
def sa_product_repo(transaction_manager):
    return SAProductRepo(transaction_manager)


@pytest.fixture
def sa_user_repo(transaction_manager):
    return SAUserRepo(transaction_manager)


@pytest.fixture
def allowed() -> AllowedValues:
    return AllowedValues.build(cities=["Moscow", "Saint Petersburg", "Kazan"],
                               product_types=["electronics", "clothes", "shoes"],
                               roles=["client", "employee", "moderator"])


@pytest.fixture
def metrics() -> CounterBusinessMetrics:
    return CounterBusinessMetrics()


@pytest.fixture
def password_hasher() -> PasslibPasswordHasher:
    # Минимальная стоимость bcrypt
    return PasslibPasswordHasher(rounds=4)


@pytest.fixture
def token_service() -> JoseTokenService:
    return JoseTokenService(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def create_pvz_uc(sa_pvz_repo, allowed, metrics) -> CreatePvzUC:
    return CreatePvzUC(sa_pvz_repo, allowed, metrics)


@pytest.fixture
def create_reception_uc(transaction_manager, sa_reception_repo, metrics) -> CreateReceptionUC:
    return CreateReceptionUC(transaction_manager, sa_reception_repo, metrics)


@pytest.fixture
def add_product_uc(transaction_manager, sa_reception_repo, sa_product_repo, allowed, metrics) -> AddProductUC:
    return AddProductUC(transaction_manager, sa_reception_repo, sa_product_repo, allowed, metrics)


@pytest.fixture
def delete_last_product_uc(transaction_manager, sa_product_repo) -> DeleteLastProductUC:
    return DeleteLastProductUC(transaction_manager, sa_product_repo)


@pytest.fixture
def close_reception_uc(transaction_manager, sa_reception_repo) -> CloseReceptionUC:
    return CloseReceptionUC(transaction_manager, sa_reception_repo)


@pytest.fixture
def get_pvzs_info_uc(transaction_manager, sa_pvz_repo, sa_reception_repo, sa_product_repo) -> GetPvzsInfoUC:
    return GetPvzsInfoUC(transaction_manager, sa_pvz_repo, sa_reception_repo, sa_product_repo)


@pytest.fixture
def get_pvzs_info_optimized_uc(sa_pvz_repo) -> GetPvzsInfoOptimizedUC:
    return GetPvzsInfoOptimizedUC(sa_pvz_repo)


@pytest.fixture
def get_pvz_list_uc(sa_pvz_repo) -> GetPvzListUC:
    return GetPvzListUC(sa_pvz_repo)


@pytest.fixture
def register_uc(transaction_manager, sa_user_repo, password_hasher, allowed) -> RegisterUC:
    return RegisterUC(transaction_manager, sa_user_repo, password_hasher, allowed)


@pytest.fixture
def login_uc(sa_user_repo, password_hasher, token_service) -> LoginUC:
    return LoginUC(sa_user_repo, password_hasher, token_service)


@pytest.fixture
def dummy_login_uc(token_service, allowed) -> DummyLoginUC:
    return DummyLoginUC(token_service, allowed)
