"""
日誌模組

整個 harness 共用一個 logger（名稱 webui_harness）：
- console：人類可讀，每行帶執行緒名稱，平行時分得出是哪個 worker
- 檔案：reports/logs/<worker>.log，xdist 每個 worker process 各寫一個檔，不會互相穿插
- JSON：設 LOG_JSON=1 時另外寫 <worker>.json.log，給 ELK / Loki 收

環境變數:
    LOG_LEVEL  console 等級 (預設 INFO，檔案固定 DEBUG)
    LOG_JSON   "1" 啟用 JSON 日誌檔
    LOG_DIR    日誌目錄 (預設 <專案>/reports/logs)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

LOGGER_NAME = "webui_harness"
DEFAULT_LOG_DIR = Path(__file__).resolve().parent.parent / "reports" / "logs"

_CONSOLE_FORMAT = "[%(asctime)s] %(levelname)-7s [%(threadName)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """一行一筆 JSON 的日誌格式"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "worker": os.getenv("PYTEST_XDIST_WORKER", "master"),
            "thread": record.threadName,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def log_file_stem() -> str:
    """日誌檔名：master 或 xdist worker 名稱 (gw0, gw1...)"""
    return os.getenv("PYTEST_XDIST_WORKER", "master")


def _create_logger() -> logging.Logger:
    _logger = logging.Logger(LOGGER_NAME)
    _logger.setLevel(logging.DEBUG)

    console_level = getattr(
        logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    text_format = logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(text_format)
    _logger.addHandler(console)

    log_dir = Path(os.getenv("LOG_DIR", DEFAULT_LOG_DIR))
    log_dir.mkdir(parents=True, exist_ok=True)
    stem = log_file_stem()

    file_handler = logging.FileHandler(log_dir / f"{stem}.log", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(text_format)
    _logger.addHandler(file_handler)

    if os.getenv("LOG_JSON", "").strip() == "1":
        json_handler = logging.FileHandler(
            log_dir / f"{stem}.json.log", encoding="utf-8"
        )
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(JsonFormatter())
        _logger.addHandler(json_handler)

    return _logger


logger = _create_logger()


def log_step(description: str) -> None:
    """記錄測試步驟"""
    logger.info(f"STEP: {description}")


def log_test_start(test_name: str) -> None:
    logger.info(f"========== 開始測試: {test_name} ==========")


def log_test_end(test_name: str, result: str) -> None:
    logger.info(f"========== 測試結束: {test_name} - 結果: {result} ==========")
