# -*- coding: utf-8 -*-

# Settings for the scrape_engine project
#
# Loaded into a scrapy.settings.Settings object by d4_scrape.py. Command
# line flags override these at "cmdline" priority. See:
#
#     https://docs.scrapy.org/en/latest/topics/settings.html
#
import os

BASE_URL = 'https://www.wowhead.com/diablo-4'

# Browser
HEADLESS = True
USER_AGENT = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
              '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36')
VIEWPORT = {'width': 1920, 'height': 1080}
BROWSER_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']

# Timeouts in seconds
PAGE_TIMEOUT = 30
LISTVIEW_TIMEOUT = 10
ROW_TIMEOUT = 10

# Crawl responsibly: everything is fetched serially with fixed pauses (seconds)
MAX_RETRIES = 3
RETRY_DELAY = 5
DELAY_BETWEEN_REQUESTS = 2
DELAY_BETWEEN_CATEGORIES = 5
PAGE_SETTLE_DELAY = 2
ITEM_LIST_SETTLE_DELAY = 3

# Index pages, one per partition
ITEM_QUALITIES = [
    ('Mythic', 6),
    ('Unique', 5),
]
ITEMS_PER_QUALITY = 20
SKILL_CLASSES = ['barbarian', 'druid', 'necromancer', 'rogue', 'sorcerer', 'spiritborn']

# Output
OUTPATH = os.path.join('public', 'data')
OUTPUT_FILES = {
    'items': 'items-scraped.json',
    'skills': 'skills-scraped.json',
    'aspects': 'aspects-scraped.json',
    'bosses': 'bosses-scraped.json',
}

# Boss roster changes every season, keep it out of the code
BOSSES_FILE = os.path.join(os.path.dirname(__file__), 'data', 'bosses.json')

LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
