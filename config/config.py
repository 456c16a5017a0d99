"""
設定管理模組
統一管理瀏覽器、執行目標 (local / grid)、逾時等設定。

設定查找順序：
    1. 環境變數 (最高優先，browser.name -> BROWSER_NAME)
    2. config/env/{TEST_ENV}.json (環境專用)
    3. config/settings.json (基底)
    4. 程式碼內建預設值

用法：
    from config.config import Config

    Config.browser()             -> "chrome"
    Config.get_int("wait.explicit", 10)
    Config.switch("grid")        # 切換環境並重新載入
"""

import json
import os
from copy import deepcopy
from pathlib import Path

from utils.logger import logger

BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = Path(__file__).resolve().parent
ENV_DIR = CONFIG_DIR / "env"

# 內建預設值
_DEFAULTS = {
    "browser": {
        "name": "chrome",
        "headless": False,
    },
    "execution": {
        "mode": "local",
        "grid_url": "http://localhost:4444/wd/hub",
        "connect_retries": 3,
        "connect_retry_delay": 2.0,
    },
    "wait": {
        "implicit": 0,
        "explicit": 10,
        "short": 3,
        "poll_interval": 0.5,
        "page_load": 30,
    },
    "artifacts": {
        "keep_days": 7,
    },
}

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


def _deep_merge(base: dict, override: dict) -> dict:
    """深層合併兩個 dict，override 覆蓋 base"""
    merged = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _read_json(path: Path) -> dict:
    # core 會 import config，這裡延遲 import 避免循環
    from core.exceptions import InvalidConfigError

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigError("設定檔", str(path), f"JSON 格式錯誤: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfigError("設定檔", str(path), "最外層必須是 object")
    # 移除 _comment 欄位
    return {k: v for k, v in data.items() if not k.startswith("_")}


class Config:
    """框架全域設定（整個 process 只載入一次，可用 reload() 重新讀取）"""

    # 截圖與報告
    REPORT_DIR = BASE_DIR / "reports"
    SCREENSHOT_DIR = REPORT_DIR / "screenshots"

    SETTINGS_FILE = CONFIG_DIR / "settings.json"

    _env_name: str = os.getenv("TEST_ENV", "local")
    _settings: dict | None = None

    # ── 載入 ──

    @classmethod
    def env_name(cls) -> str:
        return cls._env_name

    @classmethod
    def reload(cls) -> None:
        """重新讀取設定檔（動態調整設定時使用）"""
        logger.info(f"重新載入設定: env={cls._env_name}")
        cls._settings = None
        cls._ensure_loaded()

    @classmethod
    def switch(cls, env_name: str) -> None:
        """切換環境並重新載入"""
        if env_name != cls._env_name:
            logger.info(f"切換環境: {cls._env_name} → {env_name}")
        cls._env_name = env_name
        cls.reload()

    @classmethod
    def _ensure_loaded(cls) -> dict:
        if cls._settings is None:
            settings = deepcopy(_DEFAULTS)
            if cls.SETTINGS_FILE.exists():
                settings = _deep_merge(settings, _read_json(cls.SETTINGS_FILE))
                logger.debug(f"已載入設定檔: {cls.SETTINGS_FILE}")

            env_file = ENV_DIR / f"{cls._env_name}.json"
            if env_file.exists():
                settings = _deep_merge(settings, _read_json(env_file))
                logger.debug(f"已載入環境設定: {env_file}")

            cls._settings = settings
        return cls._settings

    # ── 基本查詢 ──

    @classmethod
    def get(cls, key: str, default=None):
        """
        取得設定值，支援 dot notation。

        範例:
            Config.get("browser.name")          → "chrome"
            Config.get("saucedemo.base_url")    → "https://..."
        """
        env_key = key.upper().replace(".", "_")
        env_val = os.getenv(env_key)
        if env_val is not None:
            return env_val

        value = cls._ensure_loaded()
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default
        return value

    @classmethod
    def get_int(cls, key: str, default: int) -> int:
        value = cls.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"設定值不是整數 {key}={value!r}，使用預設值 {default}")
            return default

    @classmethod
    def get_float(cls, key: str, default: float) -> float:
        value = cls.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"設定值不是數字 {key}={value!r}，使用預設值 {default}")
            return default

    @classmethod
    def get_bool(cls, key: str, default: bool) -> bool:
        value = cls.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        logger.warning(f"設定值不是布林 {key}={value!r}，使用預設值 {default}")
        return default

    # ── 瀏覽器 / 執行目標 ──

    @classmethod
    def browser(cls) -> str:
        return str(cls.get("browser.name", "chrome")).lower()

    @classmethod
    def is_headless(cls) -> bool:
        return cls.get_bool("browser.headless", False)

    @classmethod
    def execution_mode(cls) -> str:
        """local / remote（grid、docker 視為 remote）"""
        mode = str(cls.get("execution.mode", "local")).lower()
        return "remote" if mode in ("remote", "grid", "docker") else mode

    @classmethod
    def grid_url(cls) -> str:
        return str(cls.get("execution.grid_url", "http://localhost:4444/wd/hub"))

    @classmethod
    def connect_retries(cls) -> int:
        return cls.get_int("execution.connect_retries", 3)

    @classmethod
    def connect_retry_delay(cls) -> float:
        return cls.get_float("execution.connect_retry_delay", 2.0)

    # ── 逾時 (秒) ──

    @classmethod
    def implicit_wait(cls) -> float:
        return cls.get_float("wait.implicit", 0)

    @classmethod
    def explicit_wait(cls) -> float:
        return cls.get_float("wait.explicit", 10)

    @classmethod
    def short_wait(cls) -> float:
        return cls.get_float("wait.short", 3)

    @classmethod
    def poll_interval(cls) -> float:
        return cls.get_float("wait.poll_interval", 0.5)

    @classmethod
    def page_load_timeout(cls) -> float:
        return cls.get_float("wait.page_load", 30)

    # ── 受測應用程式 ──

    @classmethod
    def base_url(cls, application: str) -> str | None:
        return cls.get(f"{application}.base_url")

    @classmethod
    def username(cls, application: str) -> str | None:
        return cls.get(f"{application}.username")

    @classmethod
    def password(cls, application: str) -> str | None:
        return cls.get(f"{application}.password")
