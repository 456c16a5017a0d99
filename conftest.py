"""
pytest 全域 fixtures

提供：
- session fixture：每個測試綁定 / 釋放自己的瀏覽器 session（失敗也一定釋放）
- 失敗時自動截圖（含 Allure 報告附件）
- 命令列參數支援 (--browser, --headless, --env, --run-e2e)
- Page Object fixtures
"""

import os

import pytest

from config.config import Config
from core.session_registry import session_registry
from utils.allure_helper import attach_text, report
from utils.logger import log_test_end, log_test_start, logger
from utils.screenshot import capture_for_report, cleanup_old_artifacts


# ── 命令列參數 ──

def pytest_addoption(parser):
    """新增自訂命令列參數"""
    parser.addoption(
        "--browser",
        action="store",
        default=None,
        choices=["chrome", "firefox", "edge"],
        help="瀏覽器: chrome / firefox / edge (預設讀取設定檔)",
    )
    parser.addoption(
        "--headless",
        action="store_true",
        default=False,
        help="以 headless 模式執行",
    )
    parser.addoption(
        "--env",
        action="store",
        default=None,
        help="設定環境: local / ci / grid (對應 config/env/*.json)",
    )
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="執行需要真實瀏覽器的 e2e 測試",
    )


# ── 框架初始化 ──

def pytest_configure(config):
    """命令列參數寫入環境變數覆蓋，讓 Config 在各 worker 都讀得到"""
    browser = config.getoption("--browser")
    if browser:
        os.environ["BROWSER_NAME"] = browser
    if config.getoption("--headless"):
        os.environ["BROWSER_HEADLESS"] = "true"
    env_name = config.getoption("--env")
    if env_name:
        Config.switch(env_name)


def pytest_collection_modifyitems(config, items):
    """未加 --run-e2e 時跳過 e2e 測試"""
    if config.getoption("--run-e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="需要真實瀏覽器，加上 --run-e2e 執行")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def pytest_sessionstart(session):
    cleanup_old_artifacts()


def pytest_sessionfinish(session, exitstatus):
    """保險：關閉所有還沒釋放的瀏覽器"""
    leaked = session_registry.unbind_all()
    if leaked:
        logger.warning(f"測試結束時強制關閉 {leaked} 個 session")


# ── Session / Driver ──

@pytest.fixture(scope="function")
def session():
    """
    每個測試函式綁定自己的瀏覽器 session，結束時釋放。

    scope=function 確保每個測試獨立，互不影響；
    測試失敗或拋例外時一樣會走到 unbind。
    """
    with session_registry.scope() as bound:
        yield bound


@pytest.fixture(scope="function")
def driver(session):
    """當前測試的 WebDriver"""
    return session.driver


# ── Page Object Fixtures ──

@pytest.fixture
def login_page(session):
    from pages.login_page import LoginPage
    return LoginPage(session).open()


@pytest.fixture
def product_page(login_page):
    """已登入並停在商品頁"""
    from pages.product_page import ProductPage
    login_page.login_with_valid_credentials()
    return ProductPage(login_page.driver)


# ── 測試生命週期 Hook ──

def pytest_runtest_setup(item):
    """測試開始前記錄"""
    log_test_start(item.name)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """測試結束時：截圖 + 報告狀態"""
    outcome = yield
    report_ = outcome.get_result()
    test_name = item.name

    if report_.when == "call" and report_.passed:
        report("pass", f"{test_name} 通過 ({report_.duration:.2f}s)")
        log_test_end(test_name, "PASSED")

    elif report_.failed and report_.when in ("setup", "call"):
        report("fail", f"{test_name} 失敗: {call.excinfo.value if call.excinfo else ''}")
        log_test_end(test_name, "FAILED")

        # 不建立新 session，只拿目前還綁著的
        current = session_registry.current()
        if current is not None:
            capture_for_report(
                current, f"FAILURE_{test_name}", f"失敗截圖: {test_name}",
                trigger="failure",
            )
            try:
                attach_text(current.driver.page_source, "頁面原始碼 (HTML)")
            except Exception as e:
                logger.warning(f"取得頁面原始碼失敗: {e}")

    elif report_.skipped and report_.when in ("setup", "call"):
        report("skip", f"{test_name} 跳過")
