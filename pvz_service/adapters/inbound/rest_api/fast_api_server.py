import asyncio
from asyncio import Task
from typing import List, Union, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from pvz_service.domain.errors import AppError, ErrorCode
from pvz_service.ports.common.interfaces import Startable
from pvz_service.ports.common.logs import logger
from pvz_service.ports.outbound.metrics import BusinessMetrics, DatabaseMetrics
from pvz_service.ports.outbound.security import TokenService
from .annotations import HTTPMethod, EveryType
from .dependencies import RestUseCases
from .router import router as api_router, error_response
from .settings import FastAPIServerSettings

DEFAULT_ORIGINS = ["*"]
DEFAULT_ALLOW_METHODS = ["*"]
DEFAULT_ALLOW_HEADERS = ["*"]

DEFAULT_TITLE = "PVZ Service"
DEFAULT_DESCRIPTION = "Service for processing goods receptions at pickup points"


class FastAPIServer(Startable):

    def __init__(self,
                 host: str,
                 port: int,
                 title: str,
                 description: str,
                 origins: List[str],
                 allow_methods: List[Union[HTTPMethod, EveryType]],
                 allow_headers: List[str],
                 use_cases: RestUseCases,
                 token_service: TokenService,
                 metrics: BusinessMetrics,
                 database_metrics: Optional[DatabaseMetrics] = None):
        self._host = host
        self._port = port
        self._title = title
        self._description = description
        self._origins = origins
        self._allow_methods = allow_methods
        self._allow_headers = allow_headers

        self._app = FastAPI(title=title, description=description)
        self._app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=self._allow_methods,
            allow_headers=self._allow_headers,
        )
        self._app.state.use_cases = use_cases
        self._app.state.token_service = token_service
        self._app.state.metrics = metrics
        self._app.state.database_metrics = database_metrics
        self._app.include_router(api_router)
        handle_422_exceptions(self._app)
        handle_app_errors(self._app)

        self._server: Optional[uvicorn.Server] = None
        self._server_task: Optional[Task] = None

    @property
    def app(self) -> FastAPI:
        return self._app

    @classmethod
    def from_settings(cls,
                      settings: FastAPIServerSettings,
                      use_cases: RestUseCases,
                      token_service: TokenService,
                      metrics: BusinessMetrics,
                      database_metrics: Optional[DatabaseMetrics] = None):
        return cls(host=settings.host,
                   port=settings.port,
                   title=settings.title if settings.title else DEFAULT_TITLE,
                   description=settings.description if settings.description else DEFAULT_DESCRIPTION,
                   origins=settings.origins if settings.origins else DEFAULT_ORIGINS,
                   allow_methods=settings.allow_methods if settings.allow_methods else DEFAULT_ALLOW_METHODS,
                   allow_headers=settings.allow_headers if settings.allow_headers else DEFAULT_ALLOW_HEADERS,
                   use_cases=use_cases,
                   token_service=token_service,
                   metrics=metrics,
                   database_metrics=database_metrics)

    async def start(self) -> None:
        config = uvicorn.Config(app=self._app, host=self._host, port=self._port)
        self._server = uvicorn.Server(config=config)
        self._server_task = asyncio.create_task(self._server.serve())
        logger.info("FastAPI started; local Swagger: http://localhost:%s/docs", self._port)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.should_exit = True
        await self._server_task
        logger.info("FastAPI stopped")


def handle_422_exceptions(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        exc_str = f'{exc}'.replace('\n', ' ').replace('   ', ' ')
        logger.info("invalid request: path=%s, error=%s", request.url.path, exc_str)
        content = {'code': ErrorCode.INVALID_REQUEST.value, 'message': exc_str}
        return JSONResponse(content=content, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


def handle_app_errors(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.info("request rejected: path=%s, code=%s", request.url.path, exc.code.value)
        return error_response(exc.code, exc.message)
