from typing import FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict


def _normalized(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(value.strip().lower() for value in values)


class AllowedValues(BaseModel):
    """
    Допустимые значения городов, типов товаров и ролей.
    Создаётся один раз при старте сервиса и передаётся в сценарии по ссылке.
    Проверка принадлежности не зависит от регистра.
    """
    model_config = ConfigDict(frozen=True)

    cities: FrozenSet[str]
    product_types: FrozenSet[str]
    roles: FrozenSet[str]

    @classmethod
    def build(cls,
              cities: Iterable[str],
              product_types: Iterable[str],
              roles: Iterable[str]) -> "AllowedValues":
        return cls(cities=_normalized(cities),
                   product_types=_normalized(product_types),
                   roles=_normalized(roles))

    def is_city_allowed(self, city: str) -> bool:
        return city.strip().lower() in self.cities

    def is_product_type_allowed(self, product_type: str) -> bool:
        return product_type.strip().lower() in self.product_types

    def is_role_allowed(self, role: str) -> bool:
        return role.strip().lower() in self.roles
