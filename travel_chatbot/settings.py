from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

class Config(BaseSettings):
    db_url: str
    google_api_key: str
    llm_model: str = Field(default="gemini-2.0-flash")
    llm_temperature: float = Field(default=0.7)
    max_completion_tokens: int = Field(default=2048)
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_expires_days: int = Field(default=7)
    seed_catalog: bool = Field(default=True)
    cors_origins: list[str] = Field(default=["*"])

    # OAuth: a provider is enabled only when both of its credentials are set
    session_secret: str = Field(default="your-session-secret")
    session_https_only: bool = Field(default=False)
    callback_base_url: str = Field(default="http://localhost:8000")
    auth_redirect_url: str = Field(default="/auth")
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    facebook_app_id: Optional[str] = None
    facebook_app_secret: Optional[str] = None
    linkedin_client_id: Optional[str] = None
    linkedin_client_secret: Optional[str] = None
    github_client_id: Optional[str] = None
    github_client_secret: Optional[str] = None

config = Config() # type: ignore
