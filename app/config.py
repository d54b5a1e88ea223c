from pydantic_settings import BaseSettings
from typing import Optional, Set
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")

    DATABASE_URL: str = Field("sqlite+aiosqlite:///./analytics.db")
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    DATABASE_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Roles allowed to read analytics: comma-separated.
    HR_ROLES: str = Field("hr,admin")

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./analytics.db"
        # Ensure asyncpg is used
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def hr_roles(self) -> Set[str]:
        """
        Returns the lower-cased set of roles granted analytics access.
        """
        return {role.strip().lower() for role in self.HR_ROLES.split(",") if role.strip()}

settings = Settings()
