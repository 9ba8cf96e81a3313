from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pvz_service.adapters.inbound.rest_api.settings import FastAPIServerSettings
from pvz_service.adapters.outbound.security.settings import JWTSettings
from pvz_service.domain.schemas.allowed import AllowedValues


class AllowedSettings(BaseSettings):
    cities: List[str] = Field(default_factory=lambda: ["Moscow", "Saint Petersburg", "Kazan"])
    product_types: List[str] = Field(default_factory=lambda: ["electronics", "clothes", "shoes"])
    roles: List[str] = Field(default_factory=lambda: ["client", "employee", "moderator"])

    def as_allowed_values(self) -> AllowedValues:
        return AllowedValues.build(cities=self.cities, product_types=self.product_types, roles=self.roles)


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore",
                                      env_nested_delimiter="__",
                                      env_file_encoding='utf-8',
                                      env_file=Path(__file__).parent.parent.joinpath('.env'), )
    fastapi_server: FastAPIServerSettings = Field(default_factory=FastAPIServerSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    allowed: AllowedSettings = Field(default_factory=AllowedSettings)

    database_uri: str = "sqlite+aiosqlite:///./pvz.db"
    database_echo: bool = False
    log_level: str = "INFO"
