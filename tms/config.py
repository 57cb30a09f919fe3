from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional


class Settings(BaseSettings):
    # Application
    app_name: str = "Aarohi Task Management System"
    app_version: str = "1.0.0"
    app_description: str = "Task Management System for Aarohi Sewing Enterprises"
    log_level: str = "INFO"

    # Database Configuration
    database_url: Optional[str] = None
    db_username: Optional[str] = None
    db_password: Optional[str] = None
    db_host: str = "localhost"
    db_port: str = "5432"
    db_name: Optional[str] = None
    sql_echo: bool = False

    # Authentication
    secret_key: str = "aarohi-task-management-secret-key-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: Optional[int] = 1440

    @field_validator('algorithm', mode='before')
    @classmethod
    def parse_algorithm(cls, v):
        if v is None or v == '':
            return "HS256"
        return v

    @field_validator('access_token_expire_minutes', mode='before')
    @classmethod
    def parse_token_expire(cls, v):
        if v is None or v == '':
            return 1440
        return int(v)

    # CORS (comma separated)
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_login: str = "5/minute"
    rate_limit_public_complaint: str = "10/minute"

    # Default admin account created on first start
    seed_default_admin: bool = True
    default_admin_username: str = "admin"
    default_admin_email: str = "admin@aarohi.com"
    default_admin_full_name: str = "System Administrator"
    default_admin_mobile: str = "9999999999"
    default_admin_password: str = "aarohi@18"

    @property
    def database_connection_url(self) -> str:
        """Build database URL from individual components or use direct URL"""
        # Prioritize PostgreSQL if individual components are available
        if all([self.db_username, self.db_password, self.db_host, self.db_port, self.db_name]):
            return f"postgresql://{self.db_username}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"
        elif self.database_url:
            return self.database_url
        else:
            return "sqlite:///./tms.db"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"


settings = Settings()
