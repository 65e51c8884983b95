"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings


class LoanAccountsConfig(BaseSettings):
    """Loan accounts service configuration"""

    # Application identity, used in alert headers
    application_name: str = "loanAccountsApp"

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    sqlite_path: str = "loan_accounts.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_reload: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    class Config:
        env_prefix = "LOAN_ACCOUNTS_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LoanAccountsConfig()


def get_config() -> LoanAccountsConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LoanAccountsConfig:
    """Reload configuration from environment"""
    global config
    config = LoanAccountsConfig()
    return config
