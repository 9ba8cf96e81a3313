from pydantic_settings import BaseSettings


class JWTSettings(BaseSettings):
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    token_expiry_minutes: int = 60
