# encoding: utf-8
'''
scrape_engine.crawler -- runs the scrape category by category

Sequences index page -> detail pages -> JSON file for each requested
category over a single browser session, pausing between requests.

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
import json
import logging
import math
import time
from collections import namedtuple

from scrape_engine.browser import BrowserSession
from scrape_engine.pipelines import JsonExportPipeline
from scrape_engine.spiders.wowhead import WowheadSpider

logger = logging.getLogger(__name__)

CATEGORIES = ('items', 'skills', 'aspects', 'bosses')

IDLE = 'Idle'
INITIALIZING = 'Initializing'
LISTING = 'Listing'
DETAILING = 'Detailing'
WRITING = 'Writing'
FAILED = 'Failed'

# partitions: [(partition name, index url)], limit: per partition or None for all
CategoryJob = namedtuple('CategoryJob', ['category', 'partitions', 'limit'])


def load_boss_roster(path):
    with open(path, 'rb') as f:
        roster = json.loads(f.read().decode('utf-8'))
    if not isinstance(roster, list):
        raise ValueError("Boss roster {0} must be a JSON array of boss entries".format(path))
    for entry in roster:
        if not isinstance(entry, dict):
            raise ValueError("Boss entry {0!r} in {1} is not an object".format(entry, path))
        for key in ('name', 'type', 'guide'):
            if not entry.get(key):
                raise ValueError("Boss entry {0!r} in {1} is missing {2!r}".format(entry, path, key))
    return roster


class Scraper(object):

    def __init__(self, settings, spider=None, session=None, pipeline=None):
        self.settings = settings
        self.spider = spider or WowheadSpider.from_settings(settings)
        self.session = session or BrowserSession.from_settings(settings)
        self.pipeline = pipeline or JsonExportPipeline.from_settings(settings)
        self.delay_between_requests = settings.getfloat('DELAY_BETWEEN_REQUESTS', 2)
        self.delay_between_categories = settings.getfloat('DELAY_BETWEEN_CATEGORIES', 5)
        self.page_settle_delay = settings.getfloat('PAGE_SETTLE_DELAY', 2)
        self.item_list_settle_delay = settings.getfloat('ITEM_LIST_SETTLE_DELAY', 3)
        self.row_timeout = settings.getfloat('ROW_TIMEOUT', 10)
        self.state = IDLE
        self.written = {}

    def __str__(self):
        return "<Scraper {0} [{1}]>".format(self.spider.name, self.state)

    def _set_state(self, state):
        if state != self.state:
            logger.debug("%s -> %s", self.state, state)
            self.state = state

    def _pause(self, seconds):
        if seconds > 0:
            time.sleep(seconds)

    def make_job(self, category, limit=None):
        if category == 'items':
            qualities = self.settings.getlist('ITEM_QUALITIES')
            partitions = [(rarity, self.spider.item_list_url(quality)) for rarity, quality in qualities]
            per_partition = self.settings.getint('ITEMS_PER_QUALITY', 20)
            if limit:
                per_partition = int(math.ceil(float(limit) / len(partitions)))
        elif category == 'skills':
            classes = self.settings.getlist('SKILL_CLASSES')
            partitions = [(c, self.spider.skill_list_url(c)) for c in classes]
            per_partition = int(math.ceil(float(limit) / len(partitions))) if limit else None
        elif category == 'aspects':
            partitions = [(None, self.spider.aspect_list_url())]
            per_partition = limit or None
        elif category == 'bosses':
            roster = load_boss_roster(self.settings.get('BOSSES_FILE'))
            partitions = [(entry, self.spider.guide_url(entry['guide'])) for entry in roster]
            per_partition = None
        else:
            raise ValueError("Unknown category: {0}".format(category))
        return CategoryJob(category, partitions, per_partition)

    def run(self, categories=None, limit=None):
        '''
        Scrape the given categories in order. Only a browser that won't
        launch ends the run early, everything else is logged and skipped.
        '''
        categories = list(categories or CATEGORIES)
        self._set_state(INITIALIZING)
        try:
            self.session.open()
            for category in categories:
                try:
                    job = self.make_job(category, limit)
                except (IOError, ValueError) as e:
                    logger.error("Skipping %s: %s", category, e)
                    continue
                records = self.scrape(job)
                self._set_state(WRITING)
                outpath = self.pipeline.write_category(category, records)
                if outpath:
                    self.written[category] = outpath
            self._set_state(IDLE)
        except Exception:
            self._set_state(FAILED)
            raise
        finally:
            self.session.close()
        logger.info("Scraping complete: %s", ", ".join(
            "{0} -> {1}".format(c, p) for c, p in self.written.items()) or "nothing written")
        return self.written

    def scrape(self, job):
        logger.info("Starting %s scrape", job.category)
        if job.category == 'bosses':
            records = self.scrape_bosses(job)
        else:
            records = []
            for partition, url in job.partitions:
                records.extend(self._scrape_partition(job, partition, url))
        return self._unique(job.category, records)

    def _unique(self, category, records):
        seen = set()
        unique = []
        for record in records:
            if record['id'] in seen:
                logger.warning("Dropping duplicate %s id %s (%s)", category, record['id'], record['name'])
                continue
            seen.add(record['id'])
            unique.append(record)
        logger.info("Scraped %d %s total", len(unique), category)
        return unique

    def _list_partition(self, job, partition, url):
        self._set_state(LISTING)
        if not self.session.navigate_with_retry(url):
            logger.error("Failed to load %s index page %s", job.category, url)
            return None
        spider = self.spider
        if job.category == 'items':
            self._pause(self.item_list_settle_delay)
            self.session.wait_for_selector(spider.row_css, self.row_timeout)
            return spider.parse_item_list(self.session.content(), self.session.url, partition)
        self._pause(self.page_settle_delay)
        if job.category == 'skills':
            return spider.parse_skill_list(self.session.content(), self.session.url, partition)
        return spider.parse_aspect_list(self.session.content(), self.session.url)

    def _scrape_partition(self, job, partition, url):
        records = []
        label = "{0} {1}".format(partition, job.category) if partition else job.category
        try:
            references = self._list_partition(job, partition, url)
        except Exception:
            logger.exception("Failed to list %s", label)
            references = None
        if references is None:
            return records
        logger.info("Found %d %s", len(references), label)
        if not references:
            return records
        if job.limit is not None:
            references = references[:job.limit]

        self._set_state(DETAILING)
        for ref in references:
            self._pause(self.delay_between_requests)
            try:
                record = self._scrape_detail(job.category, ref)
            except Exception:
                logger.exception("Failed to scrape %s %s", job.category, ref['name'])
                continue
            if record is not None:
                records.append(record)
                logger.info("Scraped %s", ref['name'])
        self._pause(self.delay_between_categories)
        return records

    def _scrape_detail(self, category, ref):
        if not self.session.navigate_with_retry(ref['url']):
            logger.error("Skipping %s, detail page %s did not load", ref['name'], ref['url'])
            return None
        page_html = self.session.content()
        spider = self.spider
        if category == 'items':
            return spider.build_item(ref, spider.parse_item_detail(page_html))
        if category == 'skills':
            return spider.build_skill(ref, spider.parse_skill_detail(page_html))
        return spider.build_aspect(ref, spider.parse_aspect_detail(page_html))

    def scrape_bosses(self, job):
        bosses = []
        self._set_state(DETAILING)
        for entry, url in job.partitions:
            self._pause(self.delay_between_requests)
            logger.info("Scraping %s...", entry['name'])
            details = None
            try:
                if self.session.navigate_with_retry(url):
                    self._pause(self.page_settle_delay)
                    details = self.spider.parse_boss_guide(self.session.content())
                else:
                    logger.error("Failed to load guide for %s, keeping roster info only", entry['name'])
            except Exception:
                logger.exception("Failed to scrape boss %s, keeping roster info only", entry['name'])
                details = None
            bosses.append(self.spider.build_boss(entry, details))
        return bosses
