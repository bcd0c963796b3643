# -*- coding: utf-8 -*-

# Text transforms applied to detail page text and the pipeline writing
# each category's records to its JSON file.
#
# See: https://docs.scrapy.org/en/latest/topics/item-pipeline.html

import logging
import os
import re

from scrapy.exporters import JsonItemExporter

from scrape_engine.items import Affix, SummoningMaterial, export_fields

logger = logging.getLogger(__name__)


class DataTransform(object):

    match_rules = []

    def __init__(self, match_rules=None):
        if match_rules is None:
            match_rules = self.__class__.match_rules
        self.match_rules = match_rules

    def search(self, rule, data):
        return re.search(rule['match'], data, rule.get('options', 0))

    def finditer(self, rule, data):
        return re.finditer(rule['match'], data, rule.get('options', 0))

    def transform(self, data):
        raise NotImplementedError


class AffixTransform(DataTransform):
    '''
    Turns a stat line into an Affix.

    "+12.5% Critical Strike Chance" -> value "+12.5%", name "Critical Strike Chance".
    Lines without a numeric prefix become value-less utility affixes.
    Requirement and item power lines never become affixes.
    '''

    match_rules = [
        {
            'name': 'Signed numeric prefix',
            'match': r"^([+\-]?[\d.,]+%?)\s*(.+)",
            'type': 'Offensive'
        }]

    noise = ('Requires', 'Item Power')
    fallback_type = 'Utility'
    min_length = 3
    max_length = 200

    def transform(self, data):
        text = (data or '').strip()
        if not self.min_length < len(text) < self.max_length:
            return None
        if any(word in text for word in self.noise):
            logger.debug("Dropping stat line %r (requirement/item power)", text)
            return None
        for rule in self.match_rules:
            match = self.search(rule, text)
            if match:
                return Affix(name=match.group(2), value=match.group(1),
                             description=text, type=rule['type'])
        return Affix(name=text, value='', description=text, type=self.fallback_type)


class ScalarTransform(DataTransform):
    '''Pulls the numeric item fields out of the page text, with fixed defaults.'''

    match_rules = [
        {
            'name': 'item_power',
            'match': r"Item Power:?\s*(\d+)",
            'options': re.IGNORECASE,
            'default': 800
        },
        {
            'name': 'required_level',
            'match': r"Requires Level\s*(\d+)",
            'options': re.IGNORECASE,
            'default': 60
        }]

    def transform(self, data):
        values = {}
        for rule in self.match_rules:
            match = self.search(rule, data or '')
            if match:
                values[rule['name']] = int(match.group(1))
            else:
                values[rule['name']] = rule['default']
        return values


MATERIAL_NAMES = [
    'Malignant Heart',
    'Gurgling Head',
    'Blackened Femur',
    'Trembling Hand',
    'Living Steel',
    'Exquisite Blood',
    'Distilled Fear',
    'Mucus-Slick Egg',
    'Shard of Agony',
    'Stygian Stone',
]

_MATERIALS_RE = "|".join(re.escape(name) for name in MATERIAL_NAMES)


class MaterialTransform(DataTransform):
    '''Finds boss summoning materials, "12x Living Steel" or "Living Steel x12".'''

    # Please note: sequential order of match rules is important, the first
    # quantity seen for a material wins
    match_rules = [
        {
            'name': 'Quantity before name',
            'match': r"(\d+)x?\s+(%s)" % _MATERIALS_RE,
            'options': re.IGNORECASE,
            'quantity': 1,
            'material': 2
        },
        {
            'name': 'Quantity after name',
            'match': r"(%s)\s*[x×]\s*(\d+)" % _MATERIALS_RE,
            'options': re.IGNORECASE,
            'quantity': 2,
            'material': 1
        }]

    def transform(self, data):
        materials = []
        seen = set()
        for rule in self.match_rules:
            for match in self.finditer(rule, data or ''):
                name = match.group(rule['material'])
                if name in seen:
                    continue
                seen.add(name)
                quantity = int(match.group(rule['quantity'])) or 1
                materials.append(SummoningMaterial(name=name, quantity=quantity))
        return materials


class JsonExportPipeline(object):
    '''
    Writes one category's records as a pretty printed JSON array.

    The file is first written next to its target and then moved over it, so
    an interrupted run leaves the previous file intact. Nothing is written
    for an empty category.
    '''

    def __init__(self, outdir, filenames, indent=2, encoding='utf-8'):
        self.outdir = outdir
        self.filenames = filenames
        self.indent = indent
        self.encoding = encoding

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.get('OUTPATH', os.curdir),
                   settings.getdict('OUTPUT_FILES'))

    def get_outfile_path(self, category):
        filename = self.filenames.get(category, "{0}-scraped.json".format(category))
        return os.path.join(self.outdir, filename)

    def write_category(self, category, records):
        outpath = self.get_outfile_path(category)
        if not records:
            logger.info("Nothing to write for %s, leaving %s untouched", category, outpath)
            return None
        if not os.path.exists(self.outdir):
            os.makedirs(self.outdir)
        tmppath = outpath + '.tmp'
        try:
            with open(tmppath, 'wb') as f:
                exporter = JsonItemExporter(f, indent=self.indent, encoding=self.encoding,
                                            fields_to_export=export_fields(type(records[0])))
                exporter.start_exporting()
                for record in records:
                    exporter.export_item(record)
                exporter.finish_exporting()
            os.replace(tmppath, outpath)
        except Exception:
            if os.path.exists(tmppath):
                os.remove(tmppath)
            raise
        logger.info("Saved %d %s to %s", len(records), category, outpath)
        return outpath
