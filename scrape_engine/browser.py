# encoding: utf-8
'''
scrape_engine.browser -- headless browser session

Owns one Chromium instance and one page, reused serially for every
navigation of a run.

:author:    | André Berg
            |
:copyright: | 2015 Iris VFX. All rights reserved.
            |
:license:   | Licensed under the Apache License, Version 2.0 (the "License");
            | you may not use this file except in compliance with the License.
            | You may obtain a copy of the License at
            |
            | http://www.apache.org/licenses/LICENSE-2.0
            |
            | Unless required by applicable law or agreed to in writing, software
            | distributed under the License is distributed on an **"AS IS"** **BASIS**,
            | **WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND**, either express or implied.
            | See the License for the specific language governing permissions and
            | limitations under the License.
            |
:contact:   | andre@irisvfx.com
'''
import logging
import time

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

logger = logging.getLogger(__name__)

# Wowhead builds its list views client side through this global
LISTVIEW_READY = "() => typeof window.Listview !== 'undefined'"


class BrowserLaunchError(Exception):
    '''The browser could not be started. Fatal for the whole run.'''


class BrowserSession(object):

    def __init__(self, headless=True, user_agent=None, viewport=None, args=None,
                 page_timeout=30, listview_timeout=10, max_retries=3, retry_delay=5):
        self.headless = headless
        self.user_agent = user_agent
        self.viewport = viewport
        self.args = args or []
        self.page_timeout = page_timeout
        self.listview_timeout = listview_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._playwright = None
        self._browser = None
        self._page = None

    @classmethod
    def from_settings(cls, settings):
        return cls(headless=settings.getbool('HEADLESS', True),
                   user_agent=settings.get('USER_AGENT'),
                   viewport=settings.getdict('VIEWPORT') or None,
                   args=settings.getlist('BROWSER_ARGS'),
                   page_timeout=settings.getfloat('PAGE_TIMEOUT', 30),
                   listview_timeout=settings.getfloat('LISTVIEW_TIMEOUT', 10),
                   max_retries=settings.getint('MAX_RETRIES', 3),
                   retry_delay=settings.getfloat('RETRY_DELAY', 5))

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def url(self):
        return self._page.url if self._page is not None else None

    def open(self):
        logger.info("Launching browser (headless=%s)", self.headless)
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless, args=self.args)
            self._page = self._browser.new_page(user_agent=self.user_agent, viewport=self.viewport)
        except PlaywrightError as e:
            self.close()
            raise BrowserLaunchError("Could not launch browser: {0}".format(e))
        logger.info("Browser launched")

    def close(self):
        try:
            if self._browser is not None:
                self._browser.close()
                logger.info("Browser closed")
        finally:
            self._browser = None
            self._page = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None

    def navigate_with_retry(self, url, max_attempts=None):
        '''
        Load url, waiting for the network to go idle. Returns False once
        all attempts have failed, the caller decides what to skip.
        '''
        if max_attempts is None:
            max_attempts = self.max_retries
        retrying = Retrying(stop=stop_after_attempt(max_attempts),
                            wait=wait_fixed(self.retry_delay),
                            retry=retry_if_exception_type(PlaywrightError),
                            after=lambda retry_state: self._log_failed_attempt(retry_state, max_attempts),
                            before_sleep=self._log_retry,
                            retry_error_callback=lambda retry_state: False,
                            sleep=time.sleep)
        if not retrying(self._goto, url):
            return False
        # static markup may still be usable without it
        try:
            self._page.wait_for_function(LISTVIEW_READY, timeout=self.listview_timeout * 1000)
        except PlaywrightError as e:
            logger.warning("Listview not found on %s, continuing anyway (%s)", url, e)
        return True

    def _goto(self, url):
        logger.info("Navigating to %s", url)
        self._page.goto(url, wait_until='networkidle', timeout=self.page_timeout * 1000)
        return True

    def _log_failed_attempt(self, retry_state, max_attempts):
        logger.error("Navigation failed (attempt %d/%d): %s", retry_state.attempt_number, max_attempts,
                     retry_state.outcome.exception())

    def _log_retry(self, retry_state):
        logger.info("Retrying in %ss...", self.retry_delay)

    def wait_for_selector(self, selector, timeout):
        try:
            self._page.wait_for_selector(selector, timeout=timeout * 1000)
            return True
        except PlaywrightError:
            logger.warning("No %r elements showed up on %s", selector, self.url)
            return False

    def content(self):
        return self._page.content()
