from pydantic_settings import BaseSettings
from pathlib import Path

# Get the repository root directory (parent of integration_api directory)
REPO_ROOT = Path(__file__).parent.parent.absolute()

class Settings(BaseSettings):
    """Application settings."""

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000
    API_RELOAD: bool = True

    # Version and environment
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Invoking org defaults (only used when a request carries no x-client-context)
    SALESFORCE_API_VERSION: str = "62.0"
    SALESFORCE_INSTANCE_URL: str = ""
    SALESFORCE_ACCESS_TOKEN: str = ""
    SALESFORCE_ORG_ID: str = ""

    # Optional alternate org queried by GET /accounts
    SALESFORCE_ORG_NAME: str = ""

    # Optional Data Cloud lookup for data action events (both must be set)
    DATA_CLOUD_ORG: str = ""
    DATA_CLOUD_QUERY: str = ""

    # Connection resolver for named org connections
    INTEGRATION_API_URL: str = ""
    INTEGRATION_TOKEN: str = ""

    # Timeouts (seconds)
    HTTP_TIMEOUT_SECONDS: float = 30.0
    COMMIT_TIMEOUT_SECONDS: float = 20.0
    CALLBACK_TIMEOUT_SECONDS: float = 10.0
    PDF_TIMEOUT_SECONDS: float = 60.0

    # Headless browser settings
    BROWSER_EXECUTABLE_PATH: str = ""

    class Config:
        env_file = REPO_ROOT / ".env"

settings = Settings()
