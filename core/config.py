from pydantic_settings import BaseSettings

MIB = 1024 * 1024


class Settings(BaseSettings):
    DB_USER: str = "portal"
    DB_PASSWORD: str = ""
    DB_HOST: str = "localhost"
    DB_PORT: str = "3306"
    DB_NAME: str = "portal"
    # Full URL override, e.g. sqlite for local runs and tests
    DATABASE_URL: str | None = None

    S3_ENDPOINT_URL: str | None = None
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_REGION: str = "auto"
    S3_BUCKET: str = ""

    UPLOAD_PART_SIZE: int = 10 * MIB
    PRESIGNED_PART_EXPIRES: int = 60 * 60
    DOWNLOAD_URL_EXPIRES: int = 30 * 60
    UPLOAD_SESSION_TTL_HOURS: int = 24

    RELAY_SMALL_PAYLOAD_BYTES: int = 1 * MIB
    RELAY_SMALL_TIMEOUT: float = 120.0
    RELAY_MIN_TIMEOUT: float = 600.0
    RELAY_MIN_BYTES_PER_SEC: int = 100 * 1024

    LOG_LEVEL: str = "INFO"

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    class Config:
        env_file = ".env"

settings = Settings()
