from abc import ABC, abstractmethod
from typing import Optional, Annotated, Union

from pydantic import BaseModel, BeforeValidator

from pvz_service.domain.errors import AppError, ErrorCode, ErrorKind, error_code_of, public_message_of
from pvz_service.ports.common.logs import logger


class UCRequest(BaseModel):
    pass


def exception_as_text(e: Union[BaseException, str, None]) -> Optional[str]:
    if e is None or isinstance(e, str):
        return e
    return public_message_of(e)


def exception_as_code(e: Union[BaseException, ErrorCode, str, None]) -> Optional[ErrorCode]:
    if e is None or isinstance(e, (ErrorCode, str)):
        return e
    return error_code_of(e)


class UCResponse(BaseModel):
    request: UCRequest
    success: bool
    error: Annotated[Optional[str], BeforeValidator(exception_as_text)] = None
    error_code: Annotated[Optional[ErrorCode], BeforeValidator(exception_as_code)] = None

    @classmethod
    def failed(cls, request: UCRequest, e: BaseException, **kwargs):
        return cls(request=request, success=False, error=e, error_code=e, **kwargs)


def log_failure(operation: str, e: BaseException, **context) -> None:
    """ Ожидаемые доменные отказы пишутся в info, инфраструктурные ошибки в error """
    if isinstance(e, AppError) and e.kind != ErrorKind.INFRASTRUCTURE:
        logger.info("%s rejected: %s, code=%s", operation, context, e.code.value)
    else:
        logger.error("%s failed: %s, error=%s: %s", operation, context, e.__class__.__name__, e)


class UseCase(ABC):

    @abstractmethod
    async def apply(self, request: UCRequest) -> UCResponse:
        pass
