# -*- coding: utf-8 -*-

# Models for the scraped records
#
# Field names follow Python conventions. Where the front end expects a
# different JSON key the field carries it as 'export_name' metadata, and
# 'field_order' fixes the key order of the written files.
#
# See documentation in:
# https://docs.scrapy.org/en/latest/topics/items.html

import scrapy


class ListReference(scrapy.Item):
    '''
    A row on an index page, e.g. one line of
    https://www.wowhead.com/diablo-4/items/quality:5
    Only lives until its detail page has been scraped.
    '''
    id = scrapy.Field()
    name = scrapy.Field()
    url = scrapy.Field()
    icon_url = scrapy.Field()
    type = scrapy.Field()
    slot = scrapy.Field()
    class_req = scrapy.Field()
    partition = scrapy.Field()


class Affix(scrapy.Item):
    name = scrapy.Field()
    value = scrapy.Field()
    description = scrapy.Field()
    type = scrapy.Field()


class SummoningMaterial(scrapy.Item):
    name = scrapy.Field()
    quantity = scrapy.Field()


class BossDrop(scrapy.Item):
    name = scrapy.Field()
    type = scrapy.Field()


class D4Item(scrapy.Item):
    field_order = ('id', 'name', 'type', 'category', 'slot', 'rarity',
                   'required_level', 'item_power', 'description', 'affixes',
                   'classes', 'icon_url')

    id = scrapy.Field()
    name = scrapy.Field()
    type = scrapy.Field()
    category = scrapy.Field()
    slot = scrapy.Field()
    rarity = scrapy.Field()
    required_level = scrapy.Field(export_name='requiredLevel')
    item_power = scrapy.Field(export_name='itemPower')
    description = scrapy.Field()
    affixes = scrapy.Field()
    classes = scrapy.Field(export_name='class')
    icon_url = scrapy.Field(export_name='iconUrl')


class D4Skill(scrapy.Item):
    field_order = ('id', 'name', 'class_name', 'category', 'description', 'icon_url')

    id = scrapy.Field()
    name = scrapy.Field()
    class_name = scrapy.Field(export_name='class')
    category = scrapy.Field()
    description = scrapy.Field()
    icon_url = scrapy.Field(export_name='iconUrl')


class D4Aspect(scrapy.Item):
    field_order = ('id', 'name', 'type', 'description', 'classes',
                   'dungeon_location', 'icon_url')

    id = scrapy.Field()
    name = scrapy.Field()
    type = scrapy.Field()
    description = scrapy.Field()
    classes = scrapy.Field(export_name='class')
    dungeon_location = scrapy.Field(export_name='dungeonLocation')
    icon_url = scrapy.Field(export_name='iconUrl')


class D4Boss(scrapy.Item):
    '''
    Optional fields (tier, location, description, summoning_materials,
    drops) stay unset when nothing was found and are left out of the file.
    '''
    field_order = ('id', 'name', 'type', 'tier', 'location', 'description',
                   'summoning_materials', 'drops', 'guide_url')

    id = scrapy.Field()
    name = scrapy.Field()
    type = scrapy.Field()
    tier = scrapy.Field()
    location = scrapy.Field()
    description = scrapy.Field()
    summoning_materials = scrapy.Field(export_name='summoningMaterials')
    drops = scrapy.Field()
    guide_url = scrapy.Field(export_name='guideUrl')


def export_fields(item_cls):
    '''D4Item -> {'id': 'id', ..., 'required_level': 'requiredLevel', ...}'''
    fields = item_cls.fields
    return dict((name, fields[name].get('export_name', name))
                for name in item_cls.field_order)
