"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class BankConfig(BaseSettings):
    """Personal banking ledger configuration"""
    
    # Bank identity
    bank_name: str = "OOP Bank"
    
    # Storage configuration
    database_path: str = "personal_banking.db"  # ":memory:" for a throwaway store
    storage_key: str = "oopp_bank_v1"
    sequence_key: str = "oopp_bank_next"
    sequence_seed: int = 1000
    
    # Business rules configuration
    default_daily_limit: str = "20000"  # Savings daily withdrawal cap
    
    # Remote service configuration
    remote_enabled: bool = True
    remote_url: str = "http://localhost:8001"
    remote_timeout: float = 2.0
    
    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8001
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr
    
    class Config:
        env_prefix = "BANK_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = BankConfig()


def get_config() -> BankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankConfig:
    """Reload configuration from environment"""
    global config
    config = BankConfig()
    return config
