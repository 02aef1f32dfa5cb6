"""Server infrastructure settings."""

from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import NoDecode

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server runtime configuration.

    Environment Variables:
        BACKEND_URL: Backend API base URL (default: http://127.0.0.1:8000)
        CORS_ALLOW_ORIGINS: Comma separated origins allowed outside production

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        origins = settings.server.CORS_ALLOW_ORIGINS
        ```
    """

    BACKEND_URL: str = Field(default="http://127.0.0.1:8000", alias="BACKEND_URL")
    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        """Accept a comma separated string as well as a JSON list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v
