"""
Page Object 基底類別（元素等待與互動層）

所有 Page Object 都繼承此類，提供通用的元素操作方法。

每個元素操作都遵循同一套規則：
    在 timeout 內以 poll_interval 輪詢條件 → 成立就立刻回傳
    逾時 → 必要操作：截圖 + 拋出 ResolutionTimeoutError（測試失敗）
           查詢操作：回傳 False / 空 list，不截圖、不拋例外

條件由弱到強：
    presence      元素存在於 DOM
    visible       存在且有顯示
    interactable  可見且 enabled（click 前必須成立）

元素不快取：每個操作都重新查找，拿到的 WebElement 不會活過該次呼叫。
"""

from enum import Enum

from selenium.common.exceptions import (
    StaleElementReferenceException,
    TimeoutException,
)
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from config.config import Config
from core.exceptions import ResolutionTimeoutError, SessionNotBoundError
from core.session_registry import session_registry
from utils.logger import logger
from utils.parallel import current_worker_id
from utils.screenshot import capture, capture_for_report


class Condition(str, Enum):
    PRESENCE = "presence"
    VISIBLE = "visible"
    INTERACTABLE = "interactable"


_EXPECTED_CONDITIONS = {
    Condition.PRESENCE: EC.presence_of_all_elements_located,
    Condition.VISIBLE: EC.visibility_of_element_located,
    Condition.INTERACTABLE: EC.element_to_be_clickable,
}


class BasePage:
    """
    Page Object 基底類別

    提供：
    - 元素等待與查找（每次重新查找）
    - 點擊、輸入、讀取、hover、捲動等通用操作
    - 查詢操作（is_displayed / is_enabled）使用較短的 timeout，逾時回傳 False
    - 必要操作逾時自動截圖並讓測試失敗
    """

    def __init__(self, driver=None, timeout: float | None = None,
                 short_timeout: float | None = None,
                 poll_interval: float | None = None):
        if driver is None:
            session = session_registry.current()
            if session is None:
                raise SessionNotBoundError(current_worker_id())
            driver = session.driver
        # 也接受直接傳入 Session
        self.driver = getattr(driver, "driver", driver)
        self.timeout = Config.explicit_wait() if timeout is None else timeout
        self.short_timeout = (
            Config.short_wait() if short_timeout is None else short_timeout
        )
        self.poll_interval = (
            Config.poll_interval() if poll_interval is None else poll_interval
        )

    # ── 等待核心 ──

    def _poll(self, locator: tuple, condition: Condition, timeout: float):
        """輪詢直到條件成立；逾時拋出 selenium 的 TimeoutException"""
        wait = WebDriverWait(self.driver, timeout, poll_frequency=self.poll_interval)
        return wait.until(
            _EXPECTED_CONDITIONS[condition](locator),
            message=f"{condition.value}: {locator}",
        )

    def resolve(self, locator: tuple, condition: Condition = Condition.VISIBLE,
                timeout: float | None = None, action: str = "resolve"):
        """
        必要的元素解析：等不到就截圖並拋出 ResolutionTimeoutError。

        Args:
            locator: (By.ID, "login-button") 這類 selenium locator
            condition: 要等待成立的條件
            timeout: 覆蓋預設 timeout
            action: 失敗時截圖與錯誤訊息用的操作名稱
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            return self._poll(locator, condition, timeout)
        except TimeoutException as e:
            self._fail(action, locator, timeout, e)

    def _fail(self, action: str, locator: tuple, timeout: float,
              cause: Exception) -> None:
        logger.error(f"{action} 逾時: {locator} (等待 {timeout}s)")
        artifact = capture_for_report(
            self.driver, action,
            description=f"{action} 逾時: {locator}",
            trigger="failure",
        )
        raise ResolutionTimeoutError(locator, timeout, action, artifact) from cause

    # ── 元素查找 ──

    def find_element(self, locator: tuple, timeout: float | None = None) -> WebElement:
        """等待元素可見並回傳"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "find_element")
        logger.debug(f"找到元素: {locator}")
        return element

    def find_elements(self, locator: tuple,
                      timeout: float | None = None) -> list[WebElement]:
        """等待至少一個元素出現並回傳列表；逾時回傳空 list"""
        timeout = self.timeout if timeout is None else timeout
        try:
            elements = self._poll(locator, Condition.PRESENCE, timeout)
        except TimeoutException:
            logger.info(f"找不到任何元素: {locator} (等待 {timeout}s)")
            return []
        logger.info(f"找到 {len(elements)} 個元素: {locator}")
        return list(elements)

    def wait_for_visible(self, locator: tuple,
                         timeout: float | None = None) -> WebElement:
        """等待元素可見"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "wait_for_visible")
        logger.info(f"元素可見: {locator}")
        return element

    def wait_for_clickable(self, locator: tuple,
                           timeout: float | None = None) -> WebElement:
        """等待元素可點擊"""
        element = self.resolve(
            locator, Condition.INTERACTABLE, timeout, "wait_for_clickable",
        )
        logger.info(f"元素可點擊: {locator}")
        return element

    # ── 查詢（不拋例外）──

    def is_displayed(self, locator: tuple, timeout: float | None = None) -> bool:
        """判斷元素是否顯示；逾時回傳 False"""
        timeout = self.short_timeout if timeout is None else timeout
        try:
            self._poll(locator, Condition.VISIBLE, timeout)
        except TimeoutException:
            logger.info(f"元素未顯示: {locator}")
            return False
        logger.info(f"元素已顯示: {locator}")
        return True

    def is_enabled(self, locator: tuple, timeout: float | None = None) -> bool:
        """判斷元素是否可用；找不到或逾時回傳 False"""
        timeout = self.short_timeout if timeout is None else timeout
        try:
            enabled = self._poll(locator, Condition.VISIBLE, timeout).is_enabled()
        except (TimeoutException, StaleElementReferenceException):
            logger.info(f"元素不可用: {locator}")
            return False
        logger.info(f"元素 {locator} {'enabled' if enabled else 'disabled'}")
        return enabled

    def is_element_present(self, locator: tuple,
                           timeout: float | None = None) -> bool:
        """判斷元素是否存在於 DOM（不需可見）"""
        timeout = self.short_timeout if timeout is None else timeout
        try:
            self._poll(locator, Condition.PRESENCE, timeout)
            return True
        except TimeoutException:
            return False

    # ── 元素操作 ──

    def click(self, locator: tuple, timeout: float | None = None) -> None:
        """等待元素可點擊後點擊"""
        element = self.resolve(locator, Condition.INTERACTABLE, timeout, "click")
        logger.info(f"點擊元素: {locator}")
        element.click()

    def click_with_js(self, locator: tuple, timeout: float | None = None) -> None:
        """以 JavaScript 點擊（元素被遮擋時使用）"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "click_with_js")
        self.driver.execute_script("arguments[0].click();", element)
        logger.info(f"JavaScript 點擊元素: {locator}")

    def input_text(self, locator: tuple, text: str,
                   timeout: float | None = None) -> None:
        """清除後輸入文字（不回讀確認，需要時自行 get_text / get_attribute）"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "input_text")
        element.clear()
        element.send_keys(text)
        logger.info(f"輸入文字: '{text}' -> {locator}")

    def get_text(self, locator: tuple, timeout: float | None = None) -> str:
        """取得元素文字（去除前後空白）"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "get_text")
        text = element.text.strip()
        logger.info(f"取得文字 '{text}' <- {locator}")
        return text

    def get_attribute(self, locator: tuple, attribute: str,
                      timeout: float | None = None) -> str | None:
        """取得元素屬性；屬性不存在時回傳 None"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "get_attribute")
        value = element.get_attribute(attribute)
        logger.info(f"取得屬性 {attribute}={value!r} <- {locator}")
        return value

    def hover(self, locator: tuple, timeout: float | None = None) -> None:
        """滑鼠移到元素上"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "hover")
        ActionChains(self.driver).move_to_element(element).perform()
        logger.info(f"Hover 元素: {locator}")

    def scroll_into_view(self, locator: tuple, timeout: float | None = None) -> None:
        """捲動到元素位置"""
        element = self.resolve(locator, Condition.VISIBLE, timeout, "scroll_into_view")
        self.driver.execute_script("arguments[0].scrollIntoView(true);", element)
        logger.info(f"捲動到元素: {locator}")

    def dismiss(self, locator: tuple, timeout: float | None = None) -> bool:
        """
        若元素 (例如錯誤訊息的關閉按鈕) 有顯示就點擊它。

        只負責點擊，不確認目標是否真的消失；需要時由呼叫端再用
        is_displayed() 確認。

        Returns:
            True = 有點擊, False = 元素未顯示
        """
        if not self.is_displayed(locator, timeout):
            return False
        logger.info(f"關閉元素: {locator}")
        self.click(locator, timeout)
        return True

    # ── 斷言 ──

    def assert_text_equals(self, locator: tuple, expected: str,
                           message: str = "文字不符") -> None:
        actual = self.get_text(locator)
        if actual != expected:
            logger.error(f"{message}: 預期 = '{expected}', 實際 = '{actual}'")
            capture_for_report(
                self.driver, "text_assertion_failed", message, trigger="failure",
            )
            raise AssertionError(
                f"{message}: 預期 = '{expected}', 實際 = '{actual}'"
            )

    def assert_text_contains(self, locator: tuple, expected: str,
                             message: str = "文字未包含預期內容") -> None:
        actual = self.get_text(locator)
        if expected not in actual:
            logger.error(f"{message}: '{expected}' 不在 '{actual}' 中")
            capture_for_report(
                self.driver, "text_contains_assertion_failed", message,
                trigger="failure",
            )
            raise AssertionError(f"{message}: '{expected}' 不在 '{actual}' 中")

    # ── 頁面導覽 ──

    def open_url(self, url: str) -> None:
        logger.info(f"開啟 URL: {url}")
        self.driver.get(url)

    def get_title(self) -> str:
        title = self.driver.title
        logger.info(f"頁面標題: {title}")
        return title

    def get_current_url(self) -> str:
        url = self.driver.current_url
        logger.info(f"目前 URL: {url}")
        return url

    def refresh(self) -> None:
        logger.info("重新整理頁面")
        self.driver.refresh()

    def navigate_back(self) -> None:
        logger.info("上一頁")
        self.driver.back()

    def navigate_forward(self) -> None:
        logger.info("下一頁")
        self.driver.forward()

    # ── 頁面狀態 ──

    def get_page_source(self) -> str:
        """取得頁面原始碼（debug 用）"""
        return self.driver.page_source

    def screenshot(self, name: str):
        """主動截圖，回傳 EvidenceArtifact 或 CaptureFailed"""
        return capture(self.driver, name)
