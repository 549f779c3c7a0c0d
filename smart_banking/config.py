"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class SmartBankingConfig(BaseSettings):
    """Smart banking ledger configuration"""
    
    # Storage configuration
    accounts_file: str = "accounts.dat"
    statements_file: str = "statements.txt"
    
    # Business rules configuration
    first_account_number: int = 1001
    overdraft_limit: float = -5000.0  # Floor for OVERDRAFT accounts
    default_savings_rate: float = 0.04
    default_loan_months: int = 12
    default_loan_rate: float = 0.12
    statement_tail_lines: int = 50
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr
    
    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8090
    
    class Config:
        env_prefix = "SMART_BANKING_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global configuration instance
config = SmartBankingConfig()


def get_config() -> SmartBankingConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SmartBankingConfig:
    """Reload configuration from environment"""
    global config
    config = SmartBankingConfig()
    return config
