from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "gitarin"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full URL wins over the postgres_* parts (used by tests and docker)
    DATABASE_URL: Optional[str] = None

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Midtrans Snap
    MIDTRANS_SERVER_KEY: str = ""
    MIDTRANS_CLIENT_KEY: str = ""
    MIDTRANS_IS_PRODUCTION: bool = False

    # Biteship (areas, rates, labels, tracking)
    BITESHIP_API_KEY: str = ""
    BITESHIP_BASE_URL: str = "https://api.biteship.com/v1"
    BITESHIP_ORIGIN_AREA_ID: Optional[str] = None
    BITESHIP_ORIGIN_ADDRESS: str = "Gitarin Warehouse, Jl. Merdeka No. 1"
    BITESHIP_ORIGIN_POSTAL_CODE: int = 12345
    BITESHIP_SHIPPER_NAME: str = "Gitarin Official"
    BITESHIP_SHIPPER_PHONE: str = "081234567890"

    # RajaOngkir (provinces, cities, cost)
    RAJAONGKIR_API_KEY: str = ""
    RAJAONGKIR_BASE_URL: str = "https://api.rajaongkir.com/starter"
    RAJAONGKIR_ORIGIN_CITY_ID: str = "109"

    # Brevo transactional mail
    BREVO_API_KEY: str = ""
    MAIL_FROM: str = "noreply@gitarin.id"
    ADMIN_EMAIL: Optional[str] = None
    STORE_NAME: str = "Gitarin"

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    UPLOAD_DIR: str = "uploads"

    PAYMENT_EXPIRY_HOURS: int = 24

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
