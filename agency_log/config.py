#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Configuration
Environment-driven configuration with validation

Version: 1.0.0
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

from agency_log.constants import APP_STORAGE_KEY


class ConfigError(ValueError):
    """Invalid configuration"""
    pass


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class StorageConfig:
    """Where the journal blob lives"""
    data_dir: Path
    storage_key: str = APP_STORAGE_KEY


@dataclass
class AIConfig:
    """OpenAI feedback settings"""
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    max_tokens: int = 200
    temperature: float = 0.8
    request_timeout: float = 30.0
    max_retries: int = 2
    retry_delay: float = 1.0

    @property
    def enabled(self) -> bool:
        return bool(self.openai_api_key)


@dataclass
class TimerConfig:
    """Digital timer settings"""
    tick_interval: float = 1.0


def _env_flag(key: str, default: str = 'false') -> bool:
    return os.getenv(key, default).lower() == 'true'


class JournalConfig:
    """Application configuration.

    Build it with ``JournalConfig.from_env()`` or pass the sections directly
    in tests. Nothing here is created at import time.
    """

    def __init__(self,
                 storage: Optional[StorageConfig] = None,
                 ai: Optional[AIConfig] = None,
                 timer: Optional[TimerConfig] = None,
                 timezone: str = "UTC",
                 environment: Environment = Environment.DEVELOPMENT,
                 log_level: LogLevel = LogLevel.INFO,
                 log_to_file: bool = False,
                 log_dir: Path = Path("logs"),
                 log_format: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'):
        self.storage = storage or StorageConfig(data_dir=Path("data"))
        self.ai = ai or AIConfig()
        self.timer = timer or TimerConfig()
        self.timezone = timezone
        self.environment = environment
        self.log_level = log_level
        self.log_to_file = log_to_file
        self.log_dir = log_dir
        self.log_format = log_format
        self._validate()

    @classmethod
    def from_env(cls) -> "JournalConfig":
        """Load configuration from environment variables"""
        try:
            environment = Environment(os.getenv('ENVIRONMENT', 'development'))
            log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        except ValueError as e:
            raise ConfigError(f"Configuration errors:\n• {e}")

        try:
            storage = StorageConfig(
                data_dir=Path(os.getenv('DATA_DIR', 'data')),
                storage_key=os.getenv('STORAGE_KEY', APP_STORAGE_KEY)
            )

            api_key = os.getenv('OPENAI_API_KEY', '').strip()
            ai = AIConfig(
                openai_api_key=api_key or None,
                openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
                vision_model=os.getenv('OPENAI_VISION_MODEL', 'gpt-4o-mini'),
                max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 200)),
                temperature=float(os.getenv('OPENAI_TEMPERATURE', 0.8)),
                request_timeout=float(os.getenv('AI_TIMEOUT', 30)),
                max_retries=int(os.getenv('AI_MAX_RETRIES', 2)),
                retry_delay=float(os.getenv('AI_RETRY_DELAY', 1.0))
            )

            timer = TimerConfig(
                tick_interval=float(os.getenv('TIMER_TICK_SECONDS', 1.0))
            )
        except ValueError as e:
            raise ConfigError(f"Configuration errors:\n• {e}")

        return cls(
            storage=storage,
            ai=ai,
            timer=timer,
            timezone=os.getenv('TIMEZONE', 'UTC'),
            environment=environment,
            log_level=log_level,
            log_to_file=_env_flag('LOG_TO_FILE'),
            log_dir=Path(os.getenv('LOG_DIR', 'logs')),
            log_format=os.getenv(
                'LOG_FORMAT',
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            )
        )

    def _validate(self):
        """Collect every problem into one error"""
        errors = []

        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            errors.append(f"Unknown TIMEZONE: {self.timezone}")

        if not self.storage.storage_key:
            errors.append("STORAGE_KEY must not be empty")

        if self.ai.request_timeout <= 0:
            errors.append("AI_TIMEOUT must be positive")

        if self.ai.max_retries < 0:
            errors.append("AI_MAX_RETRIES must not be negative")

        if self.ai.max_tokens <= 0:
            errors.append("OPENAI_MAX_TOKENS must be positive")

        if self.timer.tick_interval <= 0:
            errors.append("TIMER_TICK_SECONDS must be positive")

        if errors:
            raise ConfigError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Create data and log directories"""
        directories = [self.storage.data_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    @property
    def ai_enabled(self) -> bool:
        return self.ai.enabled

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def get_logging_config(self) -> Dict[str, Any]:
        """dictConfig for ``logging.config``"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'httpx': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'httpcore': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'openai': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"agency_log_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def to_dict(self) -> Dict[str, Any]:
        """Config snapshot with the API key masked"""
        api_key = self.ai.openai_api_key
        return {
            'environment': self.environment.value,
            'data_dir': str(self.storage.data_dir),
            'storage_key': self.storage.storage_key,
            'timezone': self.timezone,
            'ai': {
                'enabled': self.ai_enabled,
                'api_key': (api_key[:6] + "...") if api_key else None,
                'model': self.ai.openai_model,
                'vision_model': self.ai.vision_model,
                'timeout': self.ai.request_timeout
            },
            'log_level': self.log_level.value
        }


__all__ = [
    'ConfigError',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'AIConfig',
    'TimerConfig',
    'JournalConfig'
]
