"""
瀏覽器 Session 建立

依引擎 (chrome / firefox / edge)、headless 與執行目標 (本機 / Selenium Grid)
建立一個 WebDriver session，並套用固定的穩定化設定。

支援：
- 各引擎固定的穩定化參數（關閉彈窗 / 擴充功能，headless 固定視窗尺寸）
- 建立時設定 implicit wait 底線與 page load 上限
- 遠端 grid 連線前健康檢查 + 連線失敗自動重試（指數退避）

用法：
    builder = SessionBuilder()
    session = builder.build("chrome", headless=True)
    session = builder.build("firefox", target=SessionTarget.remote("http://grid:4444/wd/hub"))
"""

import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from selenium import webdriver
from selenium.webdriver.remote.webdriver import WebDriver

from config.config import Config
from core.exceptions import (
    InvalidEndpointError,
    SessionConnectionError,
    UnsupportedEngineError,
)
from utils.logger import logger
from utils.retry_helper import retry

# headless 時固定的視窗尺寸，讓 headless 與有畫面時的版面一致
VIEWPORT = (1920, 1080)


class Engine(str, Enum):
    """支援的瀏覽器引擎（固定集合）"""

    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"

    @classmethod
    def parse(cls, name) -> "Engine":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise UnsupportedEngineError(
                str(name), tuple(e.value for e in cls)
            ) from None


class ExecutionMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class SessionTarget:
    """執行目標：本機啟動瀏覽器，或連到遠端 grid endpoint"""

    mode: ExecutionMode = ExecutionMode.LOCAL
    endpoint: str | None = None

    @classmethod
    def local(cls) -> "SessionTarget":
        return cls(ExecutionMode.LOCAL)

    @classmethod
    def remote(cls, endpoint: str) -> "SessionTarget":
        return cls(ExecutionMode.REMOTE, endpoint)


@dataclass
class Session:
    """一個存活中的瀏覽器，只屬於建立它的 worker"""

    driver: WebDriver
    engine: Engine
    mode: ExecutionMode
    headless: bool
    created_at: datetime = field(default_factory=datetime.now)

    def quit(self) -> None:
        self.driver.quit()

    def __str__(self) -> str:
        flag = "headless" if self.headless else "headed"
        return f"{self.engine.value}/{self.mode.value}/{flag}"


# ── 各引擎的穩定化參數 ──

def _chrome_options(headless: bool):
    options = webdriver.ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
        options.add_argument(f"--window-size={VIEWPORT[0]},{VIEWPORT[1]}")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    options.add_argument("--disable-extensions")
    options.add_argument("--disable-infobars")
    options.add_argument("--disable-notifications")
    # 關閉密碼管理彈窗與「受自動化控制」提示
    options.add_argument("--disable-save-password-bubble")
    options.add_experimental_option("useAutomationExtension", False)
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    return options


def _firefox_options(headless: bool):
    options = webdriver.FirefoxOptions()
    if headless:
        options.add_argument("-headless")
        options.add_argument(f"--width={VIEWPORT[0]}")
        options.add_argument(f"--height={VIEWPORT[1]}")
    options.set_preference("dom.webnotifications.enabled", False)
    options.set_preference("signon.rememberSignons", False)
    return options


def _edge_options(headless: bool):
    options = webdriver.EdgeOptions()
    if headless:
        options.add_argument("--headless=new")
        options.add_argument(f"--window-size={VIEWPORT[0]},{VIEWPORT[1]}")
    options.add_argument("--disable-gpu")
    options.add_argument("--disable-extensions")
    options.add_argument("--disable-infobars")
    options.add_argument("--disable-notifications")
    options.add_experimental_option("excludeSwitches", ["enable-automation"])
    return options


_OPTIONS_FACTORIES = {
    Engine.CHROME: _chrome_options,
    Engine.FIREFOX: _firefox_options,
    Engine.EDGE: _edge_options,
}

# 本機 driver 類別名稱（呼叫時才從 selenium.webdriver 取得）
_LOCAL_DRIVERS = {
    Engine.CHROME: "Chrome",
    Engine.FIREFOX: "Firefox",
    Engine.EDGE: "Edge",
}


def build_options(engine, headless: bool):
    """產生套用穩定化參數後的 Options"""
    return _OPTIONS_FACTORIES[Engine.parse(engine)](headless)


def validate_endpoint(endpoint: str | None) -> str:
    """
    驗證遠端 grid URL。

    Raises:
        InvalidEndpointError: 非 http(s)、缺少 host 或 port 不合法
    """
    if not endpoint or not str(endpoint).strip():
        raise InvalidEndpointError(str(endpoint), "未設定 grid URL")

    endpoint = str(endpoint).strip()
    parsed = urllib.parse.urlparse(endpoint)
    if parsed.scheme not in ("http", "https"):
        raise InvalidEndpointError(endpoint, "必須是 http:// 或 https://")
    if not parsed.hostname:
        raise InvalidEndpointError(endpoint, "缺少 host")
    try:
        parsed.port
    except ValueError:
        raise InvalidEndpointError(endpoint, "port 不合法") from None
    return endpoint.rstrip("/")


class SessionBuilder:
    """
    建立 WebDriver session

    local / remote 只差在「怎麼拿到 driver」，其餘設定共用。
    """

    def __init__(
        self,
        implicit_wait: float | None = None,
        page_load_timeout: float | None = None,
        connect_retries: int | None = None,
        retry_delay: float | None = None,
    ):
        self.implicit_wait = (
            Config.implicit_wait() if implicit_wait is None else implicit_wait
        )
        self.page_load_timeout = (
            Config.page_load_timeout() if page_load_timeout is None
            else page_load_timeout
        )
        self.connect_retries = (
            Config.connect_retries() if connect_retries is None else connect_retries
        )
        self.retry_delay = (
            Config.connect_retry_delay() if retry_delay is None else retry_delay
        )

    # ── Grid 健康檢查 ──

    @staticmethod
    def health_check(url: str, timeout: float = 5.0) -> bool:
        """
        檢查 Selenium Grid 是否可連線。

        Returns:
            True = grid 可用, False = 不可用
        """
        status_url = f"{url.rstrip('/')}/status"
        try:
            req = urllib.request.Request(status_url, method="GET")
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return resp.status == 200
        except (urllib.error.URLError, OSError, TimeoutError):
            return False

    # ── Session 建立 ──

    def build(self, engine, headless: bool = False,
              target: SessionTarget | None = None) -> Session:
        """
        建立一個瀏覽器 session。

        Args:
            engine: "chrome" / "firefox" / "edge" 或 Engine
            headless: 是否 headless
            target: 執行目標，預設本機

        Returns:
            Session

        Raises:
            UnsupportedEngineError: 不支援的引擎
            InvalidEndpointError: 遠端模式但 grid URL 格式錯誤
            SessionConnectionError: 遠端連線重試後仍失敗
        """
        engine = Engine.parse(engine)
        target = target or SessionTarget.local()
        endpoint = None
        if target.mode is ExecutionMode.REMOTE:
            endpoint = validate_endpoint(target.endpoint)

        options = build_options(engine, headless)
        logger.info(
            f"建立 {engine.value} session "
            f"({'headless' if headless else 'headed'}, {target.mode.value})"
        )

        if target.mode is ExecutionMode.REMOTE:
            driver = self._connect_remote(endpoint, options)
        else:
            driver_cls = getattr(webdriver, _LOCAL_DRIVERS[engine])
            driver = driver_cls(options=options)

        try:
            self._configure(driver, headless)
        except Exception:
            # 設定失敗也不能留下孤兒瀏覽器
            driver.quit()
            raise

        session = Session(
            driver=driver, engine=engine, mode=target.mode, headless=headless,
        )
        logger.info(f"Session 已建立: {session}")
        return session

    def build_from_config(self) -> Session:
        """依 Config 的 browser / headless / execution 設定建立 session"""
        if Config.execution_mode() == ExecutionMode.REMOTE.value:
            target = SessionTarget.remote(Config.grid_url())
        else:
            target = SessionTarget.local()
        return self.build(Config.browser(), Config.is_headless(), target)

    # ── 內部方法 ──

    def _connect_remote(self, url: str, options) -> WebDriver:
        if not self.health_check(url):
            logger.warning(f"Selenium Grid 健康檢查失敗: {url}，仍嘗試連線...")

        try:
            driver = retry(
                lambda: webdriver.Remote(command_executor=url, options=options),
                max_attempts=max(1, self.connect_retries),
                delay=self.retry_delay,
                backoff=2.0,
            )
        except Exception as e:
            raise SessionConnectionError(url, e) from e

        logger.info(f"已連上 Selenium Grid: {url}")
        return driver

    def _configure(self, driver: WebDriver, headless: bool) -> None:
        # implicit wait 只是底線；真正的等待由每次操作的 timeout 決定
        driver.implicitly_wait(self.implicit_wait)
        driver.set_page_load_timeout(self.page_load_timeout)
        if not headless:
            driver.maximize_window()
