from pydantic_settings import BaseSettings
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


class Settings(BaseSettings):
    APP_NAME: str = "TradeSync"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False  # development mode: error responses include detail + stack

    # Databases, one per service, overridden by env vars in deployment
    DATABASE_URL: str = f"sqlite:///{_DATA_DIR / 'tradesync.db'}"
    BROKER_A_DATABASE_URL: str = f"sqlite:///{_DATA_DIR / 'broker_a.db'}"
    BROKER_B_DATABASE_URL: str = f"sqlite:///{_DATA_DIR / 'broker_b.db'}"

    # Auth. The same secret is shared by the main service and both broker services
    SECRET_KEY: str = "tradesync-dev-secret-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BROKER_TOKEN_EXPIRE_MINUTES: int = 60

    # Broker services
    BROKER_A_API: str = "http://localhost:3001/api/trades/broker-a"
    BROKER_B_API: str = "http://localhost:3002/api/trades/broker-b"
    BROKER_TIMEOUT_SECONDS: float = 10.0

    # Insight provider (groq | openai | claude)
    LLM_PROVIDER: str = "groq"
    LLM_API_KEY: str = ""
    LLM_MODEL: str = "llama3-70b-8192"
    LLM_TEMPERATURE: float = 0.5
    LLM_MAX_TOKENS: int = 1024

    # CORS
    FRONTEND_URL: str = "http://localhost:5173"

    MAIN_PORT: int = 3000
    BROKER_A_PORT: int = 3001
    BROKER_B_PORT: int = 3002

    class Config:
        env_file = ".env"


settings = Settings()
