import asyncio

from pvz_service.adapters.inbound.rest_api.dependencies import RestUseCases
from pvz_service.adapters.inbound.rest_api.fast_api_server import FastAPIServer
from pvz_service.adapters.outbound.metrics.counter import CounterBusinessMetrics, CounterDatabaseMetrics
from pvz_service.adapters.outbound.repo.sa.database import Database
from pvz_service.adapters.outbound.repo.sa.impls.product import SAProductRepo
from pvz_service.adapters.outbound.repo.sa.impls.pvz import SAPvzRepo
from pvz_service.adapters.outbound.repo.sa.impls.reception import SAReceptionRepo
from pvz_service.adapters.outbound.repo.sa.impls.user import SAUserRepo
from pvz_service.adapters.outbound.repo.sa.transaction import SATransactionManager
from pvz_service.adapters.outbound.security.jose_token_service import JoseTokenService
from pvz_service.adapters.outbound.security.passlib_hasher import PasslibPasswordHasher
from pvz_service.domain.use_cases.external.auth import DummyLoginUC, RegisterUC, LoginUC
from pvz_service.domain.use_cases.external.pvz import CreatePvzUC, CreateReceptionUC, AddProductUC, \
    DeleteLastProductUC, CloseReceptionUC, GetPvzsInfoUC, GetPvzsInfoOptimizedUC, GetPvzListUC
from pvz_service.ports.common.logs import logger, set_log_level
from pvz_service.settings import ServiceSettings


def build_server(settings: ServiceSettings, database: Database) -> FastAPIServer:
    allowed = settings.allowed.as_allowed_values()
    transaction_manager = SATransactionManager(database)
    metrics = CounterBusinessMetrics()
    token_service = JoseTokenService(secret_key=settings.jwt.secret_key,
                                     algorithm=settings.jwt.algorithm,
                                     token_expiry_minutes=settings.jwt.token_expiry_minutes)
    password_hasher = PasslibPasswordHasher()

    # REPO
    pvz_repo = SAPvzRepo(transaction_manager)
    reception_repo = SAReceptionRepo(transaction_manager)
    product_repo = SAProductRepo(transaction_manager)
    user_repo = SAUserRepo(transaction_manager)

    # USE CASE
    use_cases = RestUseCases(
        dummy_login=DummyLoginUC(token_service, allowed),
        register_user=RegisterUC(transaction_manager, user_repo, password_hasher, allowed),
        login=LoginUC(user_repo, password_hasher, token_service),
        create_pvz=CreatePvzUC(pvz_repo, allowed, metrics),
        create_reception=CreateReceptionUC(transaction_manager, reception_repo, metrics),
        add_product=AddProductUC(transaction_manager, reception_repo, product_repo, allowed, metrics),
        delete_last_product=DeleteLastProductUC(transaction_manager, product_repo),
        close_reception=CloseReceptionUC(transaction_manager, reception_repo),
        get_pvzs_info=GetPvzsInfoUC(transaction_manager, pvz_repo, reception_repo, product_repo),
        get_pvzs_info_optimized=GetPvzsInfoOptimizedUC(pvz_repo),
        get_pvz_list=GetPvzListUC(pvz_repo),
    )
    return FastAPIServer.from_settings(settings.fastapi_server, use_cases, token_service, metrics, database.metrics)


async def main():
    settings = ServiceSettings()
    set_log_level(settings.log_level)
    database = Database(settings.database_uri, echo=settings.database_echo, metrics=CounterDatabaseMetrics())
    server = build_server(settings, database)

    startable = [database, server]
    for startable_obj in startable:
        await startable_obj.start()
    try:
        await asyncio.Future()
    except BaseException as e:
        logger.critical("Stop service due to error: %s: %s", e.__class__.__name__, e)
    finally:
        for startable_obj in reversed(startable):
            await startable_obj.stop()


if __name__ == '__main__':
    asyncio.run(main())
