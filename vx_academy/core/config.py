import os
from dotenv import load_dotenv
from typing import Optional, List

# Load .env file from the package directory (parent of core/)
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
load_dotenv(dotenv_path)

class Settings:
    PROJECT_NAME: str = "VX Academy API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL", "sqlite:///./vx_academy.db")

    # CORS
    CORS_ALLOWED_ORIGINS_STR: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    @property
    def CORS_ALLOWED_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS_STR.split(',') if origin.strip()]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Identity is resolved by the upstream gateway and forwarded in this header
    USER_ID_HEADER: str = os.getenv("USER_ID_HEADER", "X-User-Id")

    # Assessments
    DEFAULT_PASSING_SCORE: int = int(os.getenv("DEFAULT_PASSING_SCORE", "70"))
    DEFAULT_MAX_RETAKES: int = int(os.getenv("DEFAULT_MAX_RETAKES", "3"))

    # Certificates
    CERTIFICATE_VALIDITY_DAYS: int = int(os.getenv("CERTIFICATE_VALIDITY_DAYS", "730"))
    CERTIFICATE_NUMBER_PREFIX: str = os.getenv("CERTIFICATE_NUMBER_PREFIX", "VX")

    # Reports: a frontliner counts as active after a login within this many days
    ACTIVE_USER_WINDOW_DAYS: int = int(os.getenv("ACTIVE_USER_WINDOW_DAYS", "15"))

    # Application settings
    APP_FRONTEND_URL: str = os.getenv("APP_FRONTEND_URL", "http://localhost:5173")

    # Email settings
    EMAIL_HOST: Optional[str] = os.getenv("EMAIL_HOST")
    EMAIL_PORT: int = int(os.getenv("EMAIL_PORT", "587")) # Default to 587 for TLS
    EMAIL_USERNAME: Optional[str] = os.getenv("EMAIL_USERNAME")
    EMAIL_PASSWORD: Optional[str] = os.getenv("EMAIL_PASSWORD")
    EMAIL_FROM_ADDRESS: Optional[str] = os.getenv("EMAIL_FROM_ADDRESS")
    EMAIL_FROM_NAME: Optional[str] = os.getenv("EMAIL_FROM_NAME", PROJECT_NAME)
    EMAIL_USE_TLS: bool = os.getenv("EMAIL_USE_TLS", "true").lower() == "true"
    EMAIL_USE_SSL: bool = os.getenv("EMAIL_USE_SSL", "false").lower() == "true"


settings = Settings()
