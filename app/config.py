# app/config.py
from pydantic_settings import BaseSettings
from pydantic import computed_field


class Settings(BaseSettings):
    # Explicit URL wins (e.g. sqlite:///./rideshare.db in dev, sqlite:// in tests)
    database_url: str | None = None

    mysql_user: str | None = None
    mysql_password: str | None = None
    mysql_host: str | None = None
    mysql_db: str | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    environment: str = "development"

    # Metrics
    default_period: str = "week"

    @computed_field
    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        if self.mysql_user and self.mysql_host and self.mysql_db:
            # Use mysqlclient (MySQLdb) driver
            return (
                f"mysql+mysqldb://{self.mysql_user}:{self.mysql_password or ''}"
                f"@{self.mysql_host}/{self.mysql_db}?charset=utf8mb4"
            )
        return "sqlite:///./rideshare.db"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
