from pathlib import Path
from typing import Annotated, List, Literal

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Seat Ticketing Core'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Logging; the rotating file sink is only added in DEBUG
    LOG_DIR: Path = _PROJECT_ROOT / 'logs'
    LOG_FILE_PREFIX: str = ''
    LOG_FILE_RETENTION: str = '7 days'

    # Tracing; spans are only exported when an endpoint or the console export is set
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ''
    OTEL_CONSOLE_EXPORT: bool = False

    # Security (platform JWT, issued by the external account service)
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'

    # CORS
    # Comma separated or a JSON list
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            return [str(origin) for origin in orjson.loads(v)]
        elif isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # Backend selection
    STORAGE_BACKEND: Literal['memory', 'postgres'] = 'memory'
    LOCK_BACKEND: Literal['local', 'kvrocks'] = 'local'

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticketing_core'

    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}@'
            f'{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Kvrocks Configuration (Redis protocol + Kvrocks storage)
    KVROCKS_HOST: str = 'localhost'
    KVROCKS_PORT: int = 6666
    KVROCKS_DB: int = 0
    KVROCKS_PASSWORD: str = ''
    REDIS_DECODE_RESPONSES: bool = True

    KVROCKS_POOL_MAX_CONNECTIONS: int = 100
    KVROCKS_POOL_SOCKET_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_CONNECT_TIMEOUT: int = 10  # seconds
    KVROCKS_POOL_SOCKET_KEEPALIVE: bool = True
    KVROCKS_POOL_HEALTH_CHECK_INTERVAL: int = 30  # seconds

    # Seat inventory
    DEFAULT_TOTAL_SEATS: int = 100  # used when an event carries no capacity
    SEAT_ID_PREFIX: str = 'S'
    SEAT_LOCK_TTL_SECONDS: int = 10
    SEAT_LOCK_ACQUIRE_TIMEOUT_SECONDS: float = 5.0
    SEAT_LOCK_RETRY_INTERVAL_SECONDS: float = 0.02

    # Booking
    MAX_TICKETS_PER_BOOKING: int = 10

    # Payment proof (shared with the payment simulation service)
    PAYMENT_PROOF_SECRET: SecretStr = SecretStr('dev-payment-secret')
    PAYMENT_PROOF_ALGORITHM: str = 'HS256'
    PAYMENT_PROOF_TTL_MINUTES: int = 10
    PAYMENT_SIMULATION_ENABLED: bool = True

    # Ticket issuer (QR rendering)
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 4


settings = Settings()  # type: ignore
