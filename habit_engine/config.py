#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Engine - Configuration
Централизованная конфигурация движка привычек с валидацией
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz


class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class StorageConfig:
    """Конфигурация хранилища журнала выполнений"""
    path: Path
    backup_dir: Path
    backup_interval_hours: int = 6
    max_backups: int = 10
    auto_backup: bool = True


@dataclass
class StatsConfig:
    """Окна для статистики"""
    success_window_days: int = 30
    calendar_days: int = 30
    activity_lookback_days: int = 30


def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == 'true'


def _env_int(key: str, default: int, errors: list) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        errors.append(f"{key} должен быть целым числом, получено {raw!r}")
        return default


class EngineConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self._errors = []
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""
        errors = self._errors

        environment = os.getenv('ENVIRONMENT', 'development')
        try:
            self.environment = Environment(environment)
        except ValueError:
            errors.append(f"Неизвестная среда ENVIRONMENT={environment!r}")
            self.environment = Environment.DEVELOPMENT

        self.timezone_name = os.getenv('HABIT_TIMEZONE', 'UTC')

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Хранилище
        self.storage = StorageConfig(
            path=self.data_dir / "completions.json",
            backup_dir=self.backup_dir,
            backup_interval_hours=_env_int('BACKUP_INTERVAL_HOURS', 6, errors),
            max_backups=_env_int('MAX_BACKUPS', 10, errors),
            auto_backup=_env_flag('AUTO_BACKUP', 'true')
        )

        # Статистика
        self.stats = StatsConfig(
            success_window_days=_env_int('SUCCESS_WINDOW_DAYS', 30, errors),
            calendar_days=_env_int('CALENDAR_DAYS', 30, errors),
            activity_lookback_days=_env_int('ACTIVITY_LOOKBACK_DAYS', 30, errors)
        )

        # Логирование
        log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        try:
            self.log_level = LogLevel(log_level)
        except ValueError:
            errors.append(f"Неизвестный уровень логирования LOG_LEVEL={log_level!r}")
            self.log_level = LogLevel.INFO
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = self._errors

        if self.timezone_name not in pytz.all_timezones_set:
            errors.append(f"Неизвестный часовой пояс HABIT_TIMEZONE={self.timezone_name!r}")

        windows = {
            'SUCCESS_WINDOW_DAYS': self.stats.success_window_days,
            'CALENDAR_DAYS': self.stats.calendar_days,
            'ACTIVITY_LOOKBACK_DAYS': self.stats.activity_lookback_days,
        }
        for key, value in windows.items():
            if value <= 0:
                errors.append(f"{key} должен быть положительным числом")

        if self.storage.backup_interval_hours <= 0:
            errors.append("BACKUP_INTERVAL_HOURS должен быть положительным числом")

        if self.storage.max_backups <= 0:
            errors.append("MAX_BACKUPS должен быть положительным числом")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    @property
    def timezone(self) -> pytz.BaseTzInfo:
        """Часовой пояс пользователя"""
        return pytz.timezone(self.timezone_name)

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.backup_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        handler_config = {
            'console': {
                'class': 'logging.StreamHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'stream': sys.stdout
            }
        }
        if self.log_to_file:
            handler_config['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"habit_engine_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': handler_config,
            'loggers': {
                'habit_engine': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'timezone': self.timezone_name,
            'storage_path': str(self.storage.path),
            'backup_dir': str(self.storage.backup_dir),
            'auto_backup': self.storage.auto_backup,
            'success_window_days': self.stats.success_window_days,
            'calendar_days': self.stats.calendar_days,
            'activity_lookback_days': self.stats.activity_lookback_days,
            'log_level': self.log_level.value
        }


def load_config() -> EngineConfig:
    """Собрать конфигурацию из текущего окружения"""
    return EngineConfig()


# Глобальный экземпляр конфигурации
config = EngineConfig()

__all__ = [
    'config',
    'load_config',
    'EngineConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'StatsConfig'
]
