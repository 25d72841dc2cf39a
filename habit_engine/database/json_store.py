#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habit Engine - JSON Ledger Store
Долговечное хранилище журнала выполнений в JSON-файле
с атомарной записью и резервным копированием
"""

import json
import asyncio
import threading
import gzip
from dataclasses import dataclass
from datetime import datetime, date
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from concurrent.futures import ThreadPoolExecutor
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from habit_engine.config import EngineConfig
from habit_engine.database.ledger import LedgerStore, StoreCorruptionError, StoreWriteError
from habit_engine.utils.datetime_utils import format_day_key, parse_day_key

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"

# ===== BACKUPS =====

@dataclass(frozen=True)
class BackupInfo:
    """Резервная копия журнала"""
    path: Path
    created_at: datetime
    size_bytes: int

    @property
    def name(self) -> str:
        return self.path.name


class BackupManager:
    """Сжатые копии файла журнала с ограничением количества"""

    PREFIX = "ledger_"
    SUFFIX = ".json.gz"
    STAMP_FORMAT = '%Y%m%d_%H%M%S_%f'

    def __init__(self, backup_dir: Path, max_backups: int = 10):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _backup_files(self) -> List[Path]:
        # Метка времени в имени: порядок имён совпадает с хронологическим
        return sorted(self.backup_dir.glob(f"{self.PREFIX}*{self.SUFFIX}"), key=lambda p: p.name, reverse=True)

    def create_backup(self, source_file: Path) -> Optional[Path]:
        """Сжать текущий файл журнала в новую копию"""
        if not source_file.exists():
            logger.warning(f"Nothing to back up, {source_file} is missing")
            return None

        stamp = datetime.now().strftime(self.STAMP_FORMAT)
        target = self.backup_dir / f"{self.PREFIX}{stamp}{self.SUFFIX}"
        try:
            with gzip.open(target, 'wb') as dst:
                dst.write(source_file.read_bytes())
        except OSError as e:
            logger.error(f"Ledger backup failed: {e}")
            return None

        logger.info(f"Ledger backed up to {target.name}")
        self._prune()
        return target

    def restore_backup(self, backup_path: Path, target_file: Path) -> bool:
        """Распаковать копию поверх target_file"""
        try:
            with gzip.open(backup_path, 'rb') as src:
                payload = src.read()
            target_file.write_bytes(payload)
        except (OSError, EOFError) as e:
            logger.error(f"Could not restore {backup_path.name}: {e}")
            return False

        logger.info(f"Ledger restored from {backup_path.name}")
        return True

    def list_backups(self) -> List[BackupInfo]:
        """Копии журнала, новые первыми"""
        backups = []
        for path in self._backup_files():
            stamp = path.name[len(self.PREFIX):-len(self.SUFFIX)]
            try:
                created_at = datetime.strptime(stamp, self.STAMP_FORMAT)
                size = path.stat().st_size
            except (ValueError, OSError) as e:
                logger.warning(f"Skipping unreadable backup {path.name}: {e}")
                continue
            backups.append(BackupInfo(path=path, created_at=created_at, size_bytes=size))
        return backups

    def _prune(self) -> None:
        for stale in self._backup_files()[self.max_backups:]:
            try:
                stale.unlink()
            except OSError as e:
                logger.error(f"Could not remove old ledger backup {stale.name}: {e}")
                continue
            logger.info(f"Removed old ledger backup {stale.name}")

# ===== STORE =====

class JsonLedgerStore(LedgerStore):
    """Журнал выполнений в JSON-файле.

    Формат файла:
        {"__version__": "1.0", "completions": {habit_id: {"YYYY-MM-DD": bool}}}

    Каждая запись сохраняется сразу (write-through) через временный файл.
    Если запись на диск не удалась, изменение в памяти откатывается
    и вызывающему поднимается StoreWriteError.
    """

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None,
                 max_backups: int = 10, backup_interval_hours: int = 6,
                 auto_backup: bool = False, max_workers: int = 2):
        self.data_file = Path(data_file)
        self.backups = BackupManager(backup_dir, max_backups) if backup_dir else None
        self.backup_interval_hours = backup_interval_hours
        self.auto_backup = auto_backup and self.backups is not None

        self._data: Dict[str, Dict[str, bool]] = {}
        self.io_lock = threading.RLock()
        self.write_lock = asyncio.Lock()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ledger-io")

        self.scheduler: Optional[AsyncIOScheduler] = None
        self.closed = False
        self.write_count = 0

        self._open()

    @classmethod
    def from_config(cls, cfg: EngineConfig) -> "JsonLedgerStore":
        """Создать хранилище по конфигурации движка"""
        cfg.ensure_directories()
        return cls(
            data_file=cfg.storage.path,
            backup_dir=cfg.storage.backup_dir,
            max_backups=cfg.storage.max_backups,
            backup_interval_hours=cfg.storage.backup_interval_hours,
            auto_backup=cfg.storage.auto_backup
        )

    def _open(self) -> None:
        logger.info(f"Opening ledger at {self.data_file}")
        self.data_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._data = self._read_file()
        except StoreCorruptionError as e:
            logger.error(f"Ledger file is corrupted: {e}")
            self._recover()

        logger.info(f"Ledger holds records for {len(self._data)} habits")

    def _read_file(self) -> Dict[str, Dict[str, bool]]:
        """Прочитать и проверить файл журнала"""
        if not self.data_file.exists():
            logger.info("No ledger file yet, starting empty")
            return {}

        with self.io_lock:
            try:
                raw = json.loads(self.data_file.read_text(encoding='utf-8'))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise StoreCorruptionError(f"Invalid JSON: {e}") from e

        if not isinstance(raw, dict) or not isinstance(raw.get("completions", {}), dict):
            raise StoreCorruptionError("Unexpected ledger structure")

        data: Dict[str, Dict[str, bool]] = {}
        for habit_id, days in raw.get("completions", {}).items():
            if not isinstance(days, dict):
                raise StoreCorruptionError(f"Unexpected entry for habit {habit_id}")
            entries: Dict[str, bool] = {}
            for day, value in days.items():
                try:
                    key = format_day_key(parse_day_key(day))
                except (TypeError, ValueError) as e:
                    raise StoreCorruptionError(f"Invalid day key for habit {habit_id}: {e}") from e
                if not isinstance(value, bool):
                    raise StoreCorruptionError(f"Invalid completion value for habit {habit_id} @ {day}: {value!r}")
                entries[key] = value
            data[habit_id] = entries
        return data

    def _recover(self) -> None:
        """Отложить повреждённый файл и поднять последнюю рабочую копию"""
        quarantined = self._quarantine()

        if self.backups:
            for backup in self.backups.list_backups():
                if not self.backups.restore_backup(backup.path, self.data_file):
                    continue
                try:
                    self._data = self._read_file()
                except StoreCorruptionError as e:
                    logger.warning(f"Backup {backup.name} is unusable: {e}")
                    continue
                logger.info(f"Ledger recovered from {backup.name}, damaged file kept at {quarantined}")
                return

        if self.data_file.exists():
            self.data_file.unlink()
        logger.warning(f"No usable backup, starting with an empty ledger; damaged file kept at {quarantined}")
        self._data = {}

    def _quarantine(self) -> Optional[Path]:
        if not self.data_file.exists():
            return None
        stamp = datetime.now().strftime(BackupManager.STAMP_FORMAT)
        target = self.data_file.with_name(f"{self.data_file.stem}.corrupted_{stamp}.json")
        self.data_file.replace(target)
        return target

    def _write_file(self, data: Dict[str, Dict[str, bool]]) -> None:
        """Записать журнал целиком: временный файл, проверка, замена"""
        text = json.dumps(
            {"__version__": SCHEMA_VERSION, "completions": data},
            ensure_ascii=False, indent=2, sort_keys=True
        )
        staging = self.data_file.with_name(self.data_file.name + ".tmp")

        with self.io_lock:
            try:
                staging.write_text(text, encoding='utf-8')
                json.loads(staging.read_text(encoding='utf-8'))
                staging.replace(self.data_file)
            except Exception:
                if staging.exists():
                    staging.unlink()
                raise
            self.write_count += 1

    # ===== LEDGER STORE API =====

    async def get(self, habit_id: str, day: date) -> Optional[bool]:
        return self._data.get(habit_id, {}).get(format_day_key(day))

    async def set(self, habit_id: str, day: date, value: bool) -> None:
        if self.closed:
            raise StoreWriteError("Ledger store is closed")

        key = format_day_key(day)
        async with self.write_lock:
            days = self._data.setdefault(habit_id, {})
            previous = days.get(key)
            days[key] = bool(value)
            snapshot = {h: dict(d) for h, d in self._data.items()}

            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(self.executor, self._write_file, snapshot)
            except Exception as e:
                # На диске изменения нет, в памяти его тоже быть не должно
                if previous is None:
                    days.pop(key, None)
                    if not days:
                        self._data.pop(habit_id, None)
                else:
                    days[key] = previous
                logger.error(f"Failed to persist ledger entry {habit_id} @ {key}: {e}")
                raise StoreWriteError(f"Failed to persist ledger: {e}") from e

    async def list_since(self, habit_id: str, from_day: date) -> List[Tuple[date, bool]]:
        start = format_day_key(from_day)
        days = self._data.get(habit_id, {})
        # ISO-даты сортируются лексикографически
        return [(parse_day_key(k), v) for k, v in sorted(days.items()) if k >= start]

    # ===== MAINTENANCE =====

    async def start(self) -> None:
        """Запуск периодического резервного копирования"""
        if not self.auto_backup or self.scheduler:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.create_backup,
            IntervalTrigger(hours=self.backup_interval_hours),
            id='ledger_backup',
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Ledger backups scheduled every {self.backup_interval_hours}h")

    async def create_backup(self) -> Optional[Path]:
        """Резервная копия файла журнала"""
        if not self.backups:
            return None

        async with self.write_lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self.executor, self.backups.create_backup, self.data_file)

    def get_backups(self) -> List[BackupInfo]:
        return self.backups.list_backups() if self.backups else []

    async def shutdown(self) -> None:
        """Остановить планировщик, сделать последнюю копию и закрыть хранилище"""
        if self.closed:
            return

        logger.info("Closing ledger store...")

        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        await self.create_backup()
        self.closed = True
        self.executor.shutdown(wait=True)

        logger.info("Ledger store closed")

__all__ = [
    'BackupInfo',
    'BackupManager',
    'JsonLedgerStore',
    'SCHEMA_VERSION'
]
