"""
截圖工具（失敗現場保全）

操作失敗或測試失敗時截圖，方便 debug。
截圖本身常常是在「處理另一個失敗」時被呼叫，所以這裡的函式一律不拋例外：
失敗時回傳 CaptureFailed（falsy），由呼叫端決定要不要理會。

檔名: <label>_<YYYYmmdd_HHMMSS_ffffff>_<序號>.png，存放在 Config.SCREENSHOT_DIR，
目錄在第一次截圖時才建立；檔案以獨佔模式建立，平行截圖不會互相覆蓋。
"""

import itertools
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from config.config import Config
from utils.allure_helper import attach_artifact
from utils.logger import logger

_sequence = itertools.count(1)
_sequence_lock = threading.Lock()
_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")
_MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class EvidenceArtifact:
    """一張已存檔的截圖"""

    path: str
    label: str
    trigger: str = "explicit"  # explicit / failure
    timestamp: str = ""

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class CaptureFailed:
    """截圖失敗的結果（不是例外）"""

    label: str
    reason: str

    def __bool__(self) -> bool:
        return False


def _driver_of(session):
    """接受 Session 或直接傳 WebDriver"""
    return getattr(session, "driver", session)


def _safe_label(label: str) -> str:
    return _UNSAFE_CHARS.sub("_", label).strip("_") or "screenshot"


def _next_path(label: str) -> tuple[Path, str]:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    with _sequence_lock:
        seq = next(_sequence)
    filename = f"{label}_{timestamp}_{seq:04d}.png"
    return Config.SCREENSHOT_DIR / filename, timestamp


def _write_exclusive(label: str, png: bytes) -> tuple[Path, str]:
    for _ in range(_MAX_NAME_ATTEMPTS):
        path, timestamp = _next_path(label)
        try:
            with open(path, "xb") as f:
                f.write(png)
            return path, timestamp
        except FileExistsError:
            continue
    raise FileExistsError(f"無法產生不重複的截圖檔名: {label}")


def capture(session, label: str, trigger: str = "explicit"):
    """
    擷取螢幕截圖並儲存到 screenshots 目錄。

    Args:
        session: Session 或 WebDriver
        label: 截圖名稱（不含副檔名），通常是失敗的操作名稱
        trigger: "explicit"（主動截圖）或 "failure"（失敗時截圖）

    Returns:
        EvidenceArtifact，失敗時回傳 CaptureFailed
    """
    driver = _driver_of(session)
    safe = _safe_label(label)
    try:
        Config.SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
        png = driver.get_screenshot_as_png()
        path, timestamp = _write_exclusive(safe, png)
    except Exception as e:
        logger.error(f"截圖失敗 [{label}]: {e}")
        return CaptureFailed(label=label, reason=str(e))

    logger.info(f"截圖已儲存: {path}")
    return EvidenceArtifact(
        path=str(path), label=label, trigger=trigger, timestamp=timestamp,
    )


def capture_as_png(session):
    """截圖為記憶體中的 PNG bytes（直接附加到報告用）"""
    try:
        return _driver_of(session).get_screenshot_as_png()
    except Exception as e:
        logger.error(f"截圖 (PNG) 失敗: {e}")
        return CaptureFailed(label="png", reason=str(e))


def capture_as_base64(session):
    """截圖為 Base64 字串（嵌入 HTML 報告用）"""
    try:
        encoded = _driver_of(session).get_screenshot_as_base64()
        logger.debug("已擷取 Base64 截圖")
        return encoded
    except Exception as e:
        logger.error(f"截圖 (Base64) 失敗: {e}")
        return CaptureFailed(label="base64", reason=str(e))


def capture_failure(session, test_name: str):
    """測試失敗截圖"""
    return capture(session, f"FAILURE_{test_name}", trigger="failure")


def capture_step(session, step_name: str):
    """測試步驟截圖"""
    return capture(session, f"STEP_{step_name}")


def capture_for_report(session, label: str, description: str,
                       trigger: str = "explicit"):
    """截圖並附加到 Allure 報告"""
    artifact = capture(session, label, trigger=trigger)
    if artifact:
        attach_artifact(artifact.path, description)
    return artifact


def can_capture(session) -> bool:
    """driver 是否支援截圖"""
    return callable(getattr(_driver_of(session), "get_screenshot_as_png", None))


def cleanup_old_artifacts(days_to_keep: int | None = None) -> int:
    """
    清除超過保留天數的截圖。

    Returns:
        刪除的檔案數
    """
    if days_to_keep is None:
        days_to_keep = Config.get_int("artifacts.keep_days", 7)
    directory = Config.SCREENSHOT_DIR
    if not directory.exists():
        return 0

    cutoff = time.time() - days_to_keep * 24 * 60 * 60
    deleted = 0
    for file in directory.iterdir():
        # 平行 worker 可能同時在清，檔案隨時會消失
        try:
            if not file.is_file() or file.stat().st_mtime >= cutoff:
                continue
            file.unlink()
            deleted += 1
        except OSError as e:
            logger.warning(f"刪除舊截圖失敗 [{file}]: {e}")

    logger.info(f"已清除 {deleted} 張舊截圖")
    return deleted
