"""
商品列表頁 Page Object（SauceDemo 範例）

登入後的商品頁：讀取商品、加入購物車、排序。
"""

from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import Select

from core.base_page import BasePage


class ProductPage(BasePage):
    """商品列表頁"""

    # ── Locators ──
    INVENTORY_CONTAINER = (By.ID, "inventory_container")
    PRODUCT_NAMES = (By.CLASS_NAME, "inventory_item_name")
    PRODUCT_PRICES = (By.CLASS_NAME, "inventory_item_price")
    CART_LINK = (By.CLASS_NAME, "shopping_cart_link")
    CART_BADGE = (By.CLASS_NAME, "shopping_cart_badge")
    SORT_DROPDOWN = (By.CLASS_NAME, "product_sort_container")
    MENU_BUTTON = (By.ID, "react-burger-menu-btn")
    LOGOUT_LINK = (By.ID, "logout_sidebar_link")

    _ADD_TO_CART_BY_NAME = (
        "//div[text()='{}']/ancestor::div[@class='inventory_item']"
        "//button[contains(@id,'add-to-cart')]"
    )
    _REMOVE_BY_NAME = (
        "//div[text()='{}']/ancestor::div[@class='inventory_item']"
        "//button[contains(@id,'remove')]"
    )

    # ── 頁面操作 ──

    def add_to_cart(self, product_name: str) -> "ProductPage":
        self.click((By.XPATH, self._ADD_TO_CART_BY_NAME.format(product_name)))
        return self

    def remove_from_cart(self, product_name: str) -> "ProductPage":
        self.click((By.XPATH, self._REMOVE_BY_NAME.format(product_name)))
        return self

    def sort_by(self, visible_text: str) -> "ProductPage":
        Select(self.find_element(self.SORT_DROPDOWN)).select_by_visible_text(
            visible_text
        )
        return self

    def logout(self) -> None:
        self.click(self.MENU_BUTTON)
        self.click(self.LOGOUT_LINK)

    # ── 頁面驗證 ──

    def get_product_names(self) -> list[str]:
        return [e.text.strip() for e in self.find_elements(self.PRODUCT_NAMES)]

    def get_product_prices(self) -> list[float]:
        return [
            float(e.text.replace("$", "").strip())
            for e in self.find_elements(self.PRODUCT_PRICES)
        ]

    def get_cart_count(self) -> int:
        if not self.is_displayed(self.CART_BADGE):
            return 0
        return int(self.get_text(self.CART_BADGE))

    def is_product_page_displayed(self) -> bool:
        return (
            self.is_displayed(self.INVENTORY_CONTAINER)
            and self.is_displayed(self.CART_LINK)
        )
