"""
自訂 Exception 體系

統一的錯誤處理階層，讓每種失敗都有明確的分類與訊息。
上層可以 catch 大類別 (如 HarnessError)，
也可以精準 catch 子類別 (如 ResolutionTimeoutError)。

Exception 樹：
    HarnessError
    ├── SessionError
    │   ├── UnsupportedEngineError
    │   ├── InvalidEndpointError
    │   ├── SessionConnectionError
    │   ├── SessionNotBoundError
    │   └── SessionAlreadyBoundError
    ├── InteractionError
    │   └── ResolutionTimeoutError  (同時是 AssertionError，會讓當前測試失敗)
    └── ConfigError
        └── InvalidConfigError

截圖失敗不是例外：utils.screenshot 會回傳 CaptureFailed，不往外拋。
"""


class HarnessError(Exception):
    """框架所有例外的基底，catch 這個就能攔截一切框架錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── Session 相關 ──

class SessionError(HarnessError):
    """瀏覽器 session 建立 / 綁定相關錯誤"""


class UnsupportedEngineError(SessionError):
    """不支援的瀏覽器引擎"""

    def __init__(self, engine: str = "", supported: tuple = ()):
        msg = f"不支援的瀏覽器: {engine!r}"
        if supported:
            msg += f" (支援: {', '.join(supported)})"
        super().__init__(msg, context={"engine": engine})


class InvalidEndpointError(SessionError):
    """遠端執行的 grid URL 格式錯誤"""

    def __init__(self, endpoint: str = "", reason: str = ""):
        msg = f"無效的 Selenium Grid URL: {endpoint!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"endpoint": endpoint})


class SessionConnectionError(SessionError):
    """重試後仍無法連上遠端 grid"""

    def __init__(self, url: str = "", original: Exception | None = None):
        self.original = original
        msg = f"無法連接到 Selenium Grid: {url}"
        if original:
            msg += f" ({type(original).__name__}: {original})"
        super().__init__(msg, context={"url": url})


class SessionNotBoundError(SessionError):
    """目前的 worker 沒有綁定 session 就要操作頁面"""

    def __init__(self, worker_id: str = ""):
        super().__init__(
            f"Worker {worker_id} 尚未綁定瀏覽器 session，請先呼叫 bind()",
            context={"worker_id": worker_id},
        )


class SessionAlreadyBoundError(SessionError):
    """同一個 worker 重複綁定第二個 session"""

    def __init__(self, worker_id: str = ""):
        super().__init__(
            f"Worker {worker_id} 已綁定 session，請先 unbind()",
            context={"worker_id": worker_id},
        )


# ── 元素互動相關 ──

class InteractionError(HarnessError):
    """頁面元素互動相關錯誤"""


class ResolutionTimeoutError(InteractionError, AssertionError):
    """
    必要操作 (click / input_text / get_text ...) 在時限內等不到元素條件成立。

    拋出前已嘗試截圖，artifact 為截圖結果（成功時有 path）。
    """

    def __init__(self, locator: tuple = (), timeout: float = 0,
                 action: str = "", artifact=None):
        self.locator = locator
        self.timeout = timeout
        self.action = action
        self.artifact = artifact
        msg = f"{action or '等待元素'} 逾時: {locator} (等待 {timeout}s)"
        path = getattr(artifact, "path", None)
        if path:
            msg += f" | 截圖: {path}"
        super().__init__(msg, context={
            "locator": locator, "timeout": timeout, "action": action,
        })


# ── Config 相關 ──

class ConfigError(HarnessError):
    """設定相關錯誤"""


class InvalidConfigError(ConfigError):
    """設定值無效"""

    def __init__(self, key: str = "", value: str = "", reason: str = ""):
        msg = f"設定值無效: {key}={value}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"key": key, "value": value})
