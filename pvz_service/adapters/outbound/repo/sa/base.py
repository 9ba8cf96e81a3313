import re
from uuid import uuid4, UUID

from sqlalchemy import MetaData, Uuid, inspect
from sqlalchemy.orm import mapped_column, Mapped, declared_attr, registry


def camel_to_snake(string: str) -> str:
    """ PvzReception -> pvz_reception """
    return re.sub(r'(?<!^)(?=[A-Z])', '_', string).lower()


naming_convention = {
    "all_column_names": lambda constraint, table: "_".join([column.name for column in constraint.columns.values()]),
    "ix": "ix_%(table_name)s_%(all_column_names)s",
    "uq": "uq_%(table_name)s_%(all_column_names)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(all_column_names)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=naming_convention)
mapper_registry = registry(metadata=metadata)

_Base = mapper_registry.generate_base()


class Base(_Base, ):
    __abstract__ = True

    def to_dict(self):
        """Преобразует модель в словарь, исключает первичные ключи равные None """
        mapper = inspect(self).mapper
        pk_keys = frozenset(mapper.get_property_by_column(column).key for column in mapper.primary_key)
        return {c.key: getattr(self, c.key)
                for c in mapper.column_attrs
                if not (c.key in pk_keys and getattr(self, c.key) is None)}


class TablenameMixin:
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return camel_to_snake(cls.__name__)


class UUIDPKMixin:
    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
