import logging
import logging.config
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from habit_engine.config import EngineConfig, config as default_config

ROOT_LOGGER = "habit_engine"


def setup_logging(cfg: Optional[EngineConfig] = None) -> logging.Logger:
    """Применить конфигурацию логирования движка"""
    cfg = cfg or default_config
    if cfg.log_to_file:
        cfg.log_dir.mkdir(exist_ok=True, parents=True)
    logging.config.dictConfig(cfg.get_logging_config())
    return logging.getLogger(ROOT_LOGGER)


def add_file_handler(log_file: Union[str, Path], max_bytes: int = 10_000_000, backup_count: int = 5,
                     cfg: Optional[EngineConfig] = None) -> logging.Logger:
    """Дописывать логи движка ещё и в отдельный файл (например, при встраивании)"""
    cfg = cfg or default_config
    log_path = Path(log_file)
    log_path.parent.mkdir(exist_ok=True, parents=True)

    engine_logger = logging.getLogger(ROOT_LOGGER)
    rotating = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    rotating.setFormatter(logging.Formatter(cfg.log_format, datefmt='%Y-%m-%d %H:%M:%S'))
    engine_logger.addHandler(rotating)
    return engine_logger
