"""
Allure 報告整合輔助
封裝 Allure 常用的步驟標記、附件與狀態訊息。

報告是「順便」寫入的：
- 未安裝 allure-pytest 時，所有方法 graceful fallback，不影響測試執行
- 附件寫入失敗只記 log，不會讓呼叫端（常常正在處理另一個失敗）再出錯
"""

import functools

from utils.logger import logger

try:
    import allure
    ALLURE_AVAILABLE = True
except ImportError:
    ALLURE_AVAILABLE = False
    logger.debug("allure-pytest 未安裝，Allure 報告功能停用")

# 狀態訊息等級 -> logger 方法名稱
_LEVELS = {
    "info": "info",
    "pass": "info",
    "warning": "warning",
    "skip": "warning",
    "fail": "error",
}


def allure_step(title: str):
    """
    裝飾器：將函式標記為 Allure step。
    未安裝 allure 時直接執行原函式。

    用法：
        @allure_step("輸入帳號密碼並登入")
        def login(self, user, pwd): ...
    """
    def decorator(func):
        if ALLURE_AVAILABLE:
            @allure.step(title)
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                return func(*args, **kwargs)
            return wrapper
        return func
    return decorator


def attach_artifact(filepath: str, description: str = "截圖") -> bool:
    """
    將截圖檔附加到 Allure 報告。

    Returns:
        True = 已附加, False = allure 不可用或附加失敗
    """
    if not ALLURE_AVAILABLE:
        return False
    try:
        allure.attach.file(
            str(filepath), name=description,
            attachment_type=allure.attachment_type.PNG,
        )
        return True
    except Exception as e:
        logger.warning(f"附加截圖到報告失敗 [{filepath}]: {e}")
        return False


def attach_png(png: bytes, name: str = "截圖") -> bool:
    """將記憶體中的 PNG 附加到 Allure 報告"""
    if not ALLURE_AVAILABLE:
        return False
    try:
        allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)
        return True
    except Exception as e:
        logger.warning(f"附加 PNG 到報告失敗 [{name}]: {e}")
        return False


def attach_text(text: str, name: str = "log") -> bool:
    """將文字附加到 Allure 報告"""
    if not ALLURE_AVAILABLE:
        return False
    try:
        allure.attach(text, name=name, attachment_type=allure.attachment_type.TEXT)
        return True
    except Exception as e:
        logger.warning(f"附加文字到報告失敗 [{name}]: {e}")
        return False


def report(level: str, message: str) -> None:
    """
    寫一行狀態訊息到 log 與報告。

    Args:
        level: info / pass / fail / skip / warning
        message: 訊息內容
    """
    level = level.lower()
    log_method = getattr(logger, _LEVELS.get(level, "info"))
    log_method(f"[{level.upper()}] {message}")

    if not ALLURE_AVAILABLE:
        return
    try:
        with allure.step(f"[{level.upper()}] {message}"):
            pass
    except Exception as e:
        logger.debug(f"寫入報告步驟失敗: {e}")

