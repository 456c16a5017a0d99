"""
單元測試共用 fixtures

提供一個行程內的假瀏覽器 (FakeBrowser)：元素可以設定「幾秒後出現 / 顯示 / 可用」，
用來驗證輪詢等待的時間行為，不需要真的開瀏覽器。
"""

import base64
import time

import pytest
from selenium.common.exceptions import NoSuchElementException, WebDriverException

from config.config import Config

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


class FakeElement:
    """模擬 WebElement：狀態依建立後經過的時間變化"""

    def __init__(self, browser, text="", attributes=None, displayed=True,
                 enabled=True, displayed_after=0.0, enabled_after=0.0):
        self._browser = browser
        self._text = text
        self.attributes = attributes or {}
        self.displayed = displayed
        self.enabled = enabled
        self.displayed_after = displayed_after
        self.enabled_after = enabled_after
        self.value = ""
        self.clicks = 0

    @property
    def text(self) -> str:
        return self._text

    def is_displayed(self) -> bool:
        return self.displayed and self._browser.elapsed() >= self.displayed_after

    def is_enabled(self) -> bool:
        return self.enabled and self._browser.elapsed() >= self.enabled_after

    def get_attribute(self, name):
        return self.attributes.get(name)

    def click(self) -> None:
        self.clicks += 1

    def clear(self) -> None:
        self.value = ""

    def send_keys(self, text) -> None:
        self.value += text


class FakeBrowser:
    """模擬 WebDriver 的查詢 / 截圖介面"""

    def __init__(self):
        self._start = time.monotonic()
        self._elements: dict[tuple, list] = {}
        self.screenshot_calls = 0
        self.screenshot_error: Exception | None = None
        self.scripts: list = []
        self.visited: list[str] = []
        self.title = "Swag Labs"
        self.current_url = "https://www.saucedemo.com/"
        self.page_source = "<html></html>"
        self.quit_calls = 0

    def elapsed(self) -> float:
        return time.monotonic() - self._start

    def add(self, locator: tuple, appear_after: float = 0.0, **kwargs) -> FakeElement:
        """加入元素；appear_after 秒後才存在於 DOM"""
        element = FakeElement(self, **kwargs)
        self._elements.setdefault(tuple(locator), []).append((appear_after, element))
        return element

    def _present(self, by, value) -> list:
        now = self.elapsed()
        return [
            element for appear_after, element in self._elements.get((by, value), [])
            if now >= appear_after
        ]

    # ── WebDriver 介面 ──

    def find_element(self, by, value):
        found = self._present(by, value)
        if not found:
            raise NoSuchElementException(f"no such element: {by}={value}")
        return found[0]

    def find_elements(self, by, value):
        return self._present(by, value)

    def get_screenshot_as_png(self) -> bytes:
        self.screenshot_calls += 1
        if self.screenshot_error:
            raise self.screenshot_error
        return PNG_BYTES

    def get_screenshot_as_base64(self) -> str:
        return base64.b64encode(self.get_screenshot_as_png()).decode()

    def execute_script(self, script, *args):
        self.scripts.append((script, args))

    def get(self, url: str) -> None:
        self.visited.append(url)
        self.current_url = url

    def quit(self) -> None:
        self.quit_calls += 1


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def broken_browser():
    """已經關閉、無法截圖的 driver"""
    browser = FakeBrowser()
    browser.screenshot_error = WebDriverException("invalid session id")
    return browser


@pytest.fixture(autouse=True)
def artifact_dir(tmp_path, monkeypatch):
    """截圖改寫到暫存目錄（尚未建立，驗證延遲建立）"""
    directory = tmp_path / "screenshots"
    monkeypatch.setattr(Config, "SCREENSHOT_DIR", directory)
    return directory
