import pytest
from scrapy.settings import Settings

from scrape_engine.browser import BrowserLaunchError

BASE_URL = 'https://www.wowhead.com/diablo-4'


class FakeSession(object):
    '''Stands in for BrowserSession: serves canned HTML, None marks a page that never loads.'''

    def __init__(self, pages=None, launch_error=False):
        self.pages = pages or {}
        self.launch_error = launch_error
        self.visited = []
        self.url = None
        self.opened = False
        self.closed = False

    def open(self):
        if self.launch_error:
            raise BrowserLaunchError("Could not launch browser: no chromium")
        self.opened = True

    def close(self):
        self.closed = True

    def navigate_with_retry(self, url, max_attempts=None):
        self.visited.append(url)
        if self.pages.get(url) is None:
            return False
        self.url = url
        return True

    def wait_for_selector(self, selector, timeout):
        return True

    def content(self):
        return self.pages[self.url]


def item_row(item_id, name, item_type='Helm', slot='Helm', classes='All Classes'):
    slug = name.lower().replace(' ', '-')
    return (
        '<tr class="listview-row">'
        '<td><div class="iconmedium"><ins style="background-image: url(&quot;https://wow.zamimg.com/d4/{0}.png&quot;);"></ins></div></td>'
        '<td><a class="listview-cleartext" href="/diablo-4/item/{1}-{0}">{2}</a></td>'
        '<td>{3}</td><td>{4}</td><td>{5}</td>'
        '</tr>').format(item_id, slug, name, item_type, slot, classes)


def item_list_page(rows):
    return '<html><body><table class="listview-mode-default">{0}</table></body></html>'.format(''.join(rows))


def link_page(kind, names, start=100):
    links = []
    for offset, name in enumerate(names):
        slug = name.lower().replace(' ', '-')
        links.append('<li><a href="/diablo-4/{0}/{1}-{2}">{3}</a></li>'.format(kind, slug, start + offset, name))
    return '<html><body><ul>{0}</ul></body></html>'.format(''.join(links))


ITEM_DETAIL_PAGE = '''
<html><body>
<h1 class="heading-size-1">Harlequin Crest</h1>
<div class="db-description-display">Gain 20% Damage Reduction. In addition, gain +4 Ranks to all Skills.</div>
<ul class="item-stats">
  <li>+12.5% Critical Strike Chance</li>
  <li>1,250 Armor</li>
  <li>Lucky Hit: Up to a 5% chance to Stun</li>
  <li>Requires Level 80</li>
</ul>
<div class="tooltip-footer">Item Power: 925</div>
</body></html>
'''

BARE_DETAIL_PAGE = '<html><body><p>Nothing to see here.</p></body></html>'

SKILL_DETAIL_PAGE = '''
<html><body>
<div class="breadcrumb">Basic</div>
<div class="db-description-display">Swing your weapon and deal 33% damage.</div>
</body></html>
'''

ASPECT_DETAIL_PAGE = '''
<html><body>
<div class="category">Offensive</div>
<div class="tooltip-desc">Lucky Hit: Up to a 20% chance to deal double damage.</div>
<div class="source">Dungeon: Luban's Rest</div>
</body></html>
'''

BOSS_GUIDE_PAGE = '''
<html><body>
<p>Table of Contents: Overview, Summoning, Loot and rewards for this fight</p>
<p>Duriel is a lair boss located in the Gaping Crevasse. He burrows and spews maggots at players.</p>
<h2>Summoning</h2>
<p>Summon him with 12x Mucus-Slick Egg and Shard of Agony × 3 at the altar.</p>
<h2>Loot</h2>
<ul>
  <li><a href="/diablo-4/item/harlequin-crest-1">Harlequin Crest</a> (Mythic)</li>
  <li><a href="/diablo-4/item/tibaults-will-2">Tibault's Will</a></li>
  <li><a href="/diablo-4/item/ohm-rune-3">Ohm Rune</a> - rune</li>
  <li><a href="/diablo-4/item/tibaults-will-2">Tibault's Will</a></li>
  <li><a href="/diablo-4/item/x-4">X</a></li>
</ul>
</body></html>
'''


@pytest.fixture
def settings(tmp_path):
    settings = Settings()
    settings.setmodule('scrape_engine.settings', priority='project')
    for name in ('RETRY_DELAY', 'DELAY_BETWEEN_REQUESTS', 'DELAY_BETWEEN_CATEGORIES',
                 'PAGE_SETTLE_DELAY', 'ITEM_LIST_SETTLE_DELAY'):
        settings.set(name, 0, priority='cmdline')
    settings.set('OUTPATH', str(tmp_path / 'data'), priority='cmdline')
    return settings
