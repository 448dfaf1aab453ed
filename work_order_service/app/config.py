from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Settings
    PROJECT_NAME: str = "work-order"
    APP_VERSION: str = "0.1.0"

    # Environment Configuration
    APP_ENV: str = "dev"  # dev, staging, prod
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5060"

    # Bearer token for write endpoints; empty means open access (dev mode)
    API_TOKEN: str = ""

    # Odoo (JSON-RPC)
    ODOO_URL: str = "http://localhost:8069"
    ODOO_DATABASE: str = ""
    ODOO_USERNAME: str = ""
    ODOO_PASSWORD: str = ""
    ODOO_TIMEOUT_SECONDS: float = 30.0
    MAINTENANCE_TEAM_NAME: str = "Vitvarureperatör Mimer"

    # Xpand (read-only SQL Server)
    XPAND_DATABASE_URL: str = (
        "mssql+pyodbc://localhost:1433/xpand?driver=ODBC+Driver+18+for+SQL+Server"
    )

    # Health probes
    HEALTH_ODOO_SYSTEM_NAME: str = "odoo"
    HEALTH_ODOO_MINIMUM_MINUTES: int = 1
    HEALTH_XPAND_SYSTEM_NAME: str = "xpand"
    HEALTH_XPAND_MINIMUM_MINUTES: int = 1

    class Config:
        env_file = ".env"


settings = Settings()
