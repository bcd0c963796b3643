import json
import os

import pytest

from scrape_engine.items import Affix, D4Boss, D4Item
from scrape_engine.pipelines import (AffixTransform, JsonExportPipeline, MaterialTransform,
                                     ScalarTransform)


@pytest.mark.parametrize("line, value, name", [
    ("+12.5% Critical Strike Chance", "+12.5%", "Critical Strike Chance"),
    ("-20% Damage Taken", "-20%", "Damage Taken"),
    ("1,250 Armor", "1,250", "Armor"),
    ("  +4 Ranks to All Skills  ", "+4", "Ranks to All Skills"),
])
def test_numeric_prefix_becomes_offensive_affix(line, value, name):
    affix = AffixTransform().transform(line)
    assert affix['value'] == value
    assert affix['name'] == name
    assert affix['description'] == line.strip()
    assert affix['type'] == 'Offensive'


def test_line_without_number_becomes_utility_affix():
    line = "Lucky Hit: Up to a 5% chance to Stun"
    affix = AffixTransform().transform(line)
    assert dict(affix) == {'name': line, 'value': '', 'description': line, 'type': 'Utility'}


@pytest.mark.parametrize("line", [
    "Requires Level 60",
    "Item Power 800",
    "925 Item Power",
    "+5 Requires Barbarian",
])
def test_requirement_lines_never_become_affixes(line):
    assert AffixTransform().transform(line) is None


@pytest.mark.parametrize("line", ["", "abc", "x" * 200])
def test_too_short_or_too_long_lines_are_ignored(line):
    assert AffixTransform().transform(line) is None


def test_scalars_found_in_page_text():
    text = "Harlequin Crest\nItem power: 925\nRequires level 80"
    assert ScalarTransform().transform(text) == {'item_power': 925, 'required_level': 80}


def test_scalars_fall_back_to_defaults():
    assert ScalarTransform().transform("no numbers here") == {'item_power': 800, 'required_level': 60}
    assert ScalarTransform().transform(None) == {'item_power': 800, 'required_level': 60}


def test_materials_in_both_notations_first_seen_wins():
    text = "Bring 2 Living Steel and Stygian Stone × 3. Later: Living Steel x9."
    materials = MaterialTransform().transform(text)
    assert [dict(m) for m in materials] == [
        {'name': 'Living Steel', 'quantity': 2},
        {'name': 'Stygian Stone', 'quantity': 3},
    ]


def test_zero_quantity_counts_as_one():
    materials = MaterialTransform().transform("0x Malignant Heart")
    assert materials[0]['quantity'] == 1


def _item(item_id, name):
    return D4Item(id=item_id, name=name, type='Helm', category='Armor', slot='Helm',
                  rarity='Unique', required_level=60, item_power=800, description='',
                  affixes=[Affix(name='Armor', value='1,250', description='1,250 Armor', type='Offensive')],
                  classes=['All Classes'], icon_url='')


def test_writer_renames_fields_and_keeps_order(tmp_path):
    pipeline = JsonExportPipeline(str(tmp_path), {'items': 'items-scraped.json'})
    outpath = pipeline.write_category('items', [_item('1', 'Harlequin Crest'), _item('2', 'Shroud')])

    assert outpath == os.path.join(str(tmp_path), 'items-scraped.json')
    with open(outpath, encoding='utf-8') as f:
        data = json.load(f)
    assert [r['name'] for r in data] == ['Harlequin Crest', 'Shroud']
    assert list(data[0].keys()) == ['id', 'name', 'type', 'category', 'slot', 'rarity',
                                    'requiredLevel', 'itemPower', 'description', 'affixes',
                                    'class', 'iconUrl']
    assert data[0]['affixes'] == [{'name': 'Armor', 'value': '1,250',
                                   'description': '1,250 Armor', 'type': 'Offensive'}]
    assert not os.path.exists(outpath + '.tmp')


def test_writer_is_pretty_printed_and_omits_unset_fields(tmp_path):
    pipeline = JsonExportPipeline(str(tmp_path / 'nested' / 'out'), {})
    boss = D4Boss(id='wandering-death', name='Wandering Death', type='World Boss',
                  guide_url='https://example.com/guide')
    outpath = pipeline.write_category('bosses', [boss])

    assert outpath.endswith('bosses-scraped.json')
    with open(outpath, encoding='utf-8') as f:
        raw = f.read()
    assert raw.startswith('[\n')
    assert json.loads(raw) == [{'id': 'wandering-death', 'name': 'Wandering Death',
                                'type': 'World Boss', 'guideUrl': 'https://example.com/guide'}]


def test_writer_leaves_previous_file_alone_when_empty(tmp_path):
    target = tmp_path / 'skills-scraped.json'
    target.write_text('["previous"]')
    pipeline = JsonExportPipeline(str(tmp_path), {'skills': 'skills-scraped.json'})

    assert pipeline.write_category('skills', []) is None
    assert target.read_text() == '["previous"]'
