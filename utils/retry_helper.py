"""
重試工具
遇到指定例外時自動重試，支援指數退避。

元素等待不走這裡：頁面操作的輪詢由 BasePage 的 WebDriverWait 負責，
這裡只給「連線類」的動作用（例如連到 Selenium Grid）。

用法：
    from utils.retry_helper import retry

    drv = retry(connect, max_attempts=3, delay=2.0, backoff=2.0)
"""

import time
from typing import Callable, TypeVar

from utils.logger import logger

T = TypeVar("T")


def retry(
    func: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 1.0,
    exceptions: tuple = (Exception,),
) -> T:
    """
    重試機制，遇到指定例外時自動重試。

    Args:
        func: 要執行的 callable
        max_attempts: 最大嘗試次數
        delay: 首次重試等待秒數
        backoff: 每次重試後 delay 的倍數 (2.0 = 指數退避)
        exceptions: 要攔截重試的例外類型

    Returns:
        func 的回傳值

    Raises:
        最後一次嘗試的例外
    """
    wait = delay
    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except exceptions as e:
            if attempt == max_attempts:
                raise
            logger.warning(
                f"第 {attempt}/{max_attempts} 次嘗試失敗，"
                f"{wait:.1f}s 後重試: {e}"
            )
            time.sleep(wait)
            wait *= backoff
