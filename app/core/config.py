from typing import List, Optional, Union
from pydantic import AnyHttpUrl, validator, Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Judiciary Case Tracker API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "API for tracking judicial cases, hearings, bookmarks and case view analytics"
    API_V1_STR: str = "/api/v1"
    
    # CORS
    # Set to True to allow requests from any origin (useful for development)
    ALLOW_ALL_ORIGINS: bool = Field(True, env="ALLOW_ALL_ORIGINS")  # Default to True for development
    
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]
    
    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)
    
    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "judiciary"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    # Overrides the assembled PostgreSQL URL when set (e.g. sqlite:// for local runs)
    DATABASE_URL: Optional[str] = None
    
    # Mail
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = ""
    MAIL_TIMEOUT_SECONDS: float = 10.0
    FRONTEND_URL: str = "http://localhost:3000"
    
    # Notifications
    NOTIFICATION_WORKERS: int = 4
    
    # Case lifecycle
    STRICT_STATUS_TRANSITIONS: bool = False
    
    # Analytics
    TRENDING_DEFAULT_DAYS: int = 7
    TRENDING_DEFAULT_LIMIT: int = 10
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"
    
    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra fields in the .env file

settings = Settings()
