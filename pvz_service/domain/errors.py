import enum
from typing import Optional


class ErrorCode(str, enum.Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    INVALID_ROLE = "INVALID_ROLE"  # Роль не входит в допустимый список
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"  # Пользователь с таким email уже зарегистрирован
    PASSWORD_HASHING_FAILED = "PASSWORD_HASHING_FAILED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"  # Неверный email или пароль

    INVALID_CITY = "INVALID_CITY"  # Город не входит в допустимый список
    OPEN_RECEPTION_EXISTS = "OPEN_RECEPTION_EXISTS"  # Для ПВЗ уже есть незакрытая приёмка
    NO_OPEN_RECEPTION = "NO_OPEN_RECEPTION"  # Нет незакрытой приёмки, к которой можно привязать товар
    INVALID_PRODUCT_TYPE = "INVALID_PRODUCT_TYPE"  # Тип товара не входит в допустимый список
    NO_PRODUCTS_TO_DELETE = "NO_PRODUCTS_TO_DELETE"  # В незакрытой приёмке нет товаров
    RECEPTION_NOT_FOUND = "RECEPTION_NOT_FOUND"  # Для ПВЗ не найдена приёмка


class ErrorKind(str, enum.Enum):
    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    EXPECTED_ABSENCE = "EXPECTED_ABSENCE"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INFRASTRUCTURE = "INFRASTRUCTURE"


INTERNAL_ERROR_MESSAGE = "internal error"


class AppError(Exception):
    """
    Ошибка уровня приложения со стабильным кодом.
    Сообщение предназначено для клиента, поэтому не содержит текста ошибок хранилища.
    """
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    kind: ErrorKind = ErrorKind.INFRASTRUCTURE
    default_message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCityError(AppError):
    code = ErrorCode.INVALID_CITY
    kind = ErrorKind.VALIDATION
    default_message = "city is not allowed"


class InvalidProductTypeError(AppError):
    code = ErrorCode.INVALID_PRODUCT_TYPE
    kind = ErrorKind.VALIDATION
    default_message = "product type is not allowed"


class InvalidRoleError(AppError):
    code = ErrorCode.INVALID_ROLE
    kind = ErrorKind.VALIDATION
    default_message = "role is not allowed"


class OpenReceptionExistsError(AppError):
    code = ErrorCode.OPEN_RECEPTION_EXISTS
    kind = ErrorKind.CONFLICT
    default_message = "open reception already exists"


class UserAlreadyExistsError(AppError):
    code = ErrorCode.USER_ALREADY_EXISTS
    kind = ErrorKind.CONFLICT
    default_message = "user already exists"


class NoOpenReceptionError(AppError):
    code = ErrorCode.NO_OPEN_RECEPTION
    kind = ErrorKind.EXPECTED_ABSENCE
    default_message = "no open reception found for this pvz"


class NoProductsToDeleteError(AppError):
    code = ErrorCode.NO_PRODUCTS_TO_DELETE
    kind = ErrorKind.EXPECTED_ABSENCE
    default_message = "no products to delete"


class ReceptionNotFoundError(AppError):
    code = ErrorCode.RECEPTION_NOT_FOUND
    kind = ErrorKind.EXPECTED_ABSENCE
    default_message = "reception not found"


class NotFoundError(AppError):
    code = ErrorCode.NOT_FOUND
    kind = ErrorKind.NOT_FOUND
    default_message = "not found"


class InvalidCredentialsError(AppError):
    code = ErrorCode.INVALID_CREDENTIALS
    kind = ErrorKind.UNAUTHORIZED
    default_message = "invalid credentials"


class UnauthorizedError(AppError):
    code = ErrorCode.UNAUTHORIZED
    kind = ErrorKind.UNAUTHORIZED
    default_message = "unauthorized"


class ForbiddenError(AppError):
    code = ErrorCode.FORBIDDEN
    kind = ErrorKind.FORBIDDEN
    default_message = "forbidden"


class PasswordHashingError(AppError):
    code = ErrorCode.PASSWORD_HASHING_FAILED
    kind = ErrorKind.INFRASTRUCTURE
    default_message = "failed to hash password"


class InternalError(AppError):
    pass


def error_code_of(e: BaseException) -> ErrorCode:
    if isinstance(e, AppError):
        return e.code
    return ErrorCode.INTERNAL_ERROR


def public_message_of(e: BaseException) -> str:
    if isinstance(e, AppError):
        return e.message
    return INTERNAL_ERROR_MESSAGE


KIND_BY_CODE = {error_class.code: error_class.kind for error_class in AppError.__subclasses__()}
KIND_BY_CODE[ErrorCode.INVALID_REQUEST] = ErrorKind.VALIDATION


def kind_of(code: ErrorCode) -> ErrorKind:
    return KIND_BY_CODE.get(code, ErrorKind.INFRASTRUCTURE)
