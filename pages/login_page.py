"""
登入頁面 Page Object（SauceDemo 範例）

示範如何使用 BasePage 建立一個 Page Object。
"""

from selenium.webdriver.common.by import By

from config.config import Config
from core.base_page import BasePage
from utils.allure_helper import allure_step


class LoginPage(BasePage):
    """登入頁面"""

    # ── Locators ──
    USERNAME_INPUT = (By.ID, "user-name")
    PASSWORD_INPUT = (By.ID, "password")
    LOGIN_BUTTON = (By.ID, "login-button")
    ERROR_MESSAGE = (By.CSS_SELECTOR, "h3[data-test='error']")
    ERROR_CLOSE_BUTTON = (By.CLASS_NAME, "error-button")

    # ── 頁面操作 ──

    def open(self) -> "LoginPage":
        self.open_url(Config.base_url("saucedemo"))
        return self

    def enter_username(self, username: str) -> "LoginPage":
        self.input_text(self.USERNAME_INPUT, username)
        return self

    def enter_password(self, password: str) -> "LoginPage":
        self.input_text(self.PASSWORD_INPUT, password)
        return self

    def tap_login(self) -> None:
        self.click(self.LOGIN_BUTTON)

    @allure_step("輸入帳號密碼並登入")
    def login(self, username: str, password: str) -> None:
        """完整的登入流程"""
        self.enter_username(username)
        self.enter_password(password)
        self.tap_login()

    def login_with_valid_credentials(self) -> None:
        self.login(Config.username("saucedemo"), Config.password("saucedemo"))

    def close_error_message(self) -> bool:
        """關閉錯誤訊息；是否真的消失由呼叫端自行確認"""
        return self.dismiss(self.ERROR_CLOSE_BUTTON)

    # ── 頁面驗證 ──

    def get_error_message(self) -> str | None:
        if not self.is_displayed(self.ERROR_MESSAGE):
            return None
        return self.get_text(self.ERROR_MESSAGE)

    def is_error_displayed(self) -> bool:
        return self.is_displayed(self.ERROR_MESSAGE)

    def get_username_placeholder(self) -> str | None:
        return self.get_attribute(self.USERNAME_INPUT, "placeholder")

    def is_login_page_displayed(self) -> bool:
        return (
            self.is_displayed(self.USERNAME_INPUT)
            and self.is_displayed(self.PASSWORD_INPUT)
            and self.is_enabled(self.LOGIN_BUTTON)
        )
