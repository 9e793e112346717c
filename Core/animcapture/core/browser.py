from __future__ import annotations

import logging

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from animcapture.config.schema import BrowserSettings

log = logging.getLogger(__name__)


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, settings: BrowserSettings) -> None:
        self.settings = settings

    def start(self, browser_name: str | None = None):
        normalized = (browser_name or self.settings.browser).lower()
        size = f"{self.settings.window_width},{self.settings.window_height}"
        if normalized == "chrome":
            options = ChromeOptions()
            if self.settings.headless:
                options.add_argument("--headless=new")
            options.add_argument(f"--window-size={size}")
            options.add_argument("--disable-blink-features=AutomationControlled")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.settings.headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
            driver.set_window_size(self.settings.window_width, self.settings.window_height)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.settings.page_load_timeout_seconds)
        driver.implicitly_wait(0)
        log.info("Started %s (headless=%s)", normalized, self.settings.headless)
        return driver
