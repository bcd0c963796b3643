# encoding: utf-8
'''
scrape_engine.spiders.wowhead -- spider for www.wowhead.com/diablo-4

Knows the Wowhead URLs and markup: turns rendered index pages into
ListReferences and detail/guide pages into record fields. Everything
site specific lives here, the crawler only sees plain items and dicts.

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
import re
from urllib.parse import urljoin

from lxml import html
from lxml.cssselect import CSSSelector
from scrapy import Selector

from scrape_engine.items import BossDrop, D4Aspect, D4Boss, D4Item, D4Skill, ListReference
from scrape_engine.pipelines import AffixTransform, MaterialTransform, ScalarTransform

logger = logging.getLogger(__name__)


def _text(sel):
    return (sel.xpath('string()').get() or '').strip()


def _first_text(sel, css):
    found = sel.css(css)
    if not found:
        return ''
    return _text(found[0])


def slugify(name):
    '''Grigoire, the Galvanic Saint -> grigoire-the-galvanic-saint'''
    return re.sub(r"[^a-z0-9]+", "-", name.lower())


class WowheadSpider(object):

    name = 'wowhead'

    unwanted_types = ['Elixir', 'Incense', 'Material', 'Consumable', 'Quest', 'Scroll', 'Key']
    weapon_types = ['sword', 'axe', 'mace', 'staff', 'bow', 'crossbow', 'dagger', 'scythe', 'polearm']

    row_css = '.listview-row'
    item_description_css = '.db-description-display, .tooltip-desc, .q, .item-description'
    description_css = '.db-description-display, .tooltip-desc, .q'
    stat_css = '.q7, .q2, .item-stats li, .indent'
    skill_category_css = '.skill-category, .breadcrumb'
    aspect_type_css = '.aspect-type, .category'
    aspect_source_css = '.aspect-source, .source'
    max_drops = 20

    def __init__(self, base_url='https://www.wowhead.com/diablo-4'):
        self.base_url = base_url.rstrip('/')
        self.affix_transform = AffixTransform()
        self.scalar_transform = ScalarTransform()
        self.material_transform = MaterialTransform()

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.get('BASE_URL'))

    def item_list_url(self, quality):
        return "{0}/items/quality:{1}".format(self.base_url, quality)

    def skill_list_url(self, class_name):
        return "{0}/skills/{1}".format(self.base_url, class_name)

    def aspect_list_url(self):
        return "{0}/aspects".format(self.base_url)

    def guide_url(self, guide):
        if guide.startswith('http'):
            return guide
        return self.base_url + guide

    def _dedupe(self, references, page_url):
        seen = set()
        unique = []
        for ref in references:
            if ref['name'] in seen:
                continue
            seen.add(ref['name'])
            unique.append(ref)
        if not unique:
            logger.warning("No rows found on %s, the markup may have changed", page_url)
        return unique

    def _id_from_url(self, url, pattern, fallback):
        match = re.search(pattern, url)
        return match.group(1) if match else str(fallback)

    def _icon_url(self, row):
        style = row.css('.iconmedium ins::attr(style)').get() or ''
        match = re.search(r"url\(['\"]?(.+?)['\"]?\)", style)
        return match.group(1) if match else ''

    def parse_item_list(self, page_html, page_url, rarity=None):
        sel = Selector(text=page_html)
        references = []
        for index, row in enumerate(sel.css(self.row_css)):
            links = row.css('a.listview-cleartext')
            if not links:
                continue
            link = links[0]
            url = urljoin(page_url, link.attrib.get('href', ''))
            cells = row.css('td')
            cell_texts = [_text(cell) for cell in cells]
            item_type = cell_texts[2] if len(cell_texts) > 2 else ''
            if any(unwanted in item_type for unwanted in self.unwanted_types):
                logger.debug("Dropping row %d (type %r is not equipment)", index, item_type)
                continue
            references.append(ListReference(
                id=self._id_from_url(url, r"-(\d+)$", index + 1),
                name=_text(link) or 'Unknown',
                url=url,
                icon_url=self._icon_url(row),
                type=item_type,
                slot=cell_texts[3] if len(cell_texts) > 3 else '',
                class_req=(cell_texts[4] if len(cell_texts) > 4 else '') or 'All Classes',
                partition=rarity))
        return self._dedupe(references, page_url)

    def _parse_links(self, page_html, page_url, kind, partition=None):
        sel = Selector(text=page_html)
        references = []
        pattern = r"/{0}/[^/]+-(\d+)".format(kind)
        for index, link in enumerate(sel.css('a[href*="/{0}/"]'.format(kind))):
            name = _text(link)
            if not name:
                continue
            url = urljoin(page_url, link.attrib.get('href', ''))
            references.append(ListReference(
                id=self._id_from_url(url, pattern, index + 1),
                name=name,
                url=url,
                partition=partition))
        return self._dedupe(references, page_url)

    def parse_skill_list(self, page_html, page_url, class_name=None):
        return self._parse_links(page_html, page_url, 'skill', class_name)

    def parse_aspect_list(self, page_html, page_url):
        return self._parse_links(page_html, page_url, 'aspect')

    def parse_item_detail(self, page_html):
        sel = Selector(text=page_html)
        affixes = []
        for stat in sel.css(self.stat_css):
            affix = self.affix_transform.transform(_text(stat))
            if affix is not None:
                affixes.append(affix)
        details = self.scalar_transform.transform(sel.xpath('string(//body)').get())
        details['description'] = _first_text(sel, self.item_description_css)
        details['affixes'] = affixes
        return details

    def parse_skill_detail(self, page_html):
        sel = Selector(text=page_html)
        return {
            'description': _first_text(sel, self.description_css),
            'category': _first_text(sel, self.skill_category_css) or 'Core',
        }

    def parse_aspect_detail(self, page_html):
        sel = Selector(text=page_html)
        return {
            'description': _first_text(sel, self.description_css),
            'type': _first_text(sel, self.aspect_type_css) or 'Utility',
            'dungeon': _first_text(sel, self.aspect_source_css),
        }

    def parse_boss_guide(self, page_html):
        doc = html.fromstring(page_html)
        description = ''
        for paragraph in CSSSelector('p')(doc):
            text = paragraph.text_content().strip()
            if 50 < len(text) < 500 and 'Table of Contents' not in text:
                description = text
                break

        page_text = doc.text_content()
        location_match = re.search(r"located?\s+(?:in|at)\s+([^.]+)", page_text, re.IGNORECASE)

        drops = []
        seen = set()
        for link in CSSSelector('a[href*="/item/"]')(doc):
            name = link.text_content().strip()
            if not 3 < len(name) < 50 or name in seen:
                continue
            context = ''
            for container in link.iterancestors('li', 'tr', 'p'):
                context = container.text_content().lower()
                break
            drop_type = 'Unique'
            if 'mythic' in context:
                drop_type = 'Mythic'
            elif 'rune' in context:
                drop_type = 'Rune'
            seen.add(name)
            drops.append(BossDrop(name=name, type=drop_type))

        return {
            'description': description,
            'location': location_match.group(1).strip() if location_match else '',
            'summoning_materials': self.material_transform.transform(page_text),
            'drops': drops[:self.max_drops],
        }

    def item_category(self, item_type):
        item_type = item_type.lower()
        if any(weapon in item_type for weapon in self.weapon_types):
            return 'Weapons'
        return 'Armor'

    def split_classes(self, class_req):
        if not class_req or class_req == 'All Classes':
            return ['All Classes']
        return [c.strip() for c in class_req.split(',')]

    def build_item(self, ref, details):
        return D4Item(
            id=ref['id'],
            name=ref['name'],
            type=ref.get('type') or 'Unknown',
            category=self.item_category(ref.get('type') or ''),
            slot=ref.get('slot') or 'Unknown',
            rarity=ref['partition'],
            required_level=details['required_level'],
            item_power=details['item_power'],
            description=details['description'],
            affixes=details['affixes'],
            classes=self.split_classes(ref.get('class_req')),
            icon_url=ref.get('icon_url', ''))

    def build_skill(self, ref, details):
        class_name = ref['partition'] or ''
        return D4Skill(
            id=ref['id'],
            name=ref['name'],
            class_name=class_name[:1].upper() + class_name[1:],
            category=details['category'] or 'Core',
            description=details['description'],
            icon_url='')

    def build_aspect(self, ref, details):
        return D4Aspect(
            id=ref['id'],
            name=ref['name'],
            type=details['type'] or 'Utility',
            description=details['description'],
            classes=['All Classes'],
            dungeon_location=details['dungeon'],
            icon_url='')

    def build_boss(self, entry, details=None):
        '''Without details only the identity fields from the roster are set.'''
        boss = D4Boss(id=slugify(entry['name']), name=entry['name'], type=entry['type'])
        if entry.get('tier'):
            boss['tier'] = entry['tier']
        if details:
            for field in ('location', 'description', 'summoning_materials', 'drops'):
                if details.get(field):
                    boss[field] = details[field]
        boss['guide_url'] = self.guide_url(entry['guide'])
        return boss
