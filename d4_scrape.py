#!/usr/bin/env python3
# encoding: utf-8
'''
d4_scrape -- browser based data scraper

Scrapes the Wowhead Diablo 4 database for item, skill, aspect and boss data.

:author:    | André Berg
:copyright: | 2015 Iris VFX. All rights reserved.
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
:contact:   | andre@irisvfx.com
'''
import logging
import os
import sys

from argparse import ArgumentParser
from argparse import RawDescriptionHelpFormatter

from scrapy.settings import Settings
from scrapy.utils.log import configure_logging

from scrape_engine.browser import BrowserLaunchError, BrowserSession
from scrape_engine.crawler import CATEGORIES, Scraper
from scrape_engine.spiders.wowhead import WowheadSpider

__all__ = []
__version__ = '0.2'
__date__ = '2015-01-19'
__updated__ = '2025-06-02'

DEBUG = int(os.environ.get('DebugLevel', 0) or 0)

logger = logging.getLogger('d4_scrape')

__g_spiders = [{
    'name': 'wowhead',
    'target_domain': 'https://www.wowhead.com/diablo-4',
    'class': WowheadSpider
}]


class CLIError(Exception):
    '''Generic exception to raise and log different fatal errors.'''
    def __init__(self, msg):
        super(CLIError, self).__init__()
        self.msg = "E: %s" % msg
    def __str__(self):
        return self.msg


class CLIParser(ArgumentParser):
    '''Reports bad arguments as a CLIError, so every usage error exits with 1.'''
    def error(self, message):
        raise CLIError(message)


def get_settings():
    settings = Settings()
    settings.setmodule('scrape_engine.settings', priority='project')
    return settings


def select_categories(tokens, select_all=False):
    '''No categories given means all of them. Order is kept, repeats are dropped.'''
    unknown = [t for t in tokens if t not in CATEGORIES]
    if unknown:
        raise CLIError("Unknown categories: {} (known categories: {})".format(
            ", ".join(unknown), ", ".join(CATEGORIES)))
    if select_all or not tokens:
        return list(CATEGORIES)
    categories = []
    for token in tokens:
        if token not in categories:
            categories.append(token)
    return categories


def build_parser():
    program_version = "v%s" % __version__
    program_build_date = str(__updated__)
    program_version_message = '%%(prog)s %s (%s)' % (program_version, program_build_date)
    program_shortdesc = '''d4_scrape -- scrapes the Wowhead Diablo 4 database into JSON data files.'''
    program_license = '''%s

  Created by Andre Berg on %s.
  Copyright 2015 Iris VFX. All rights reserved.

  Licensed under the Apache License 2.0
  http://www.apache.org/licenses/LICENSE-2.0

  Distributed on an "AS IS" basis without warranties
  or conditions of any kind, either express or implied.

CATEGORIES
  items       unique and mythic items
  skills      class skills
  aspects     legendary aspects
  bosses      lair bosses, the pinnacle boss and world bosses

EXAMPLES
  d4_scrape.py items --limit 10
  d4_scrape.py skills aspects
  d4_scrape.py --all --limit 20

USAGE
''' % (program_shortdesc, str(__date__))

    parser = CLIParser(description=program_license, formatter_class=RawDescriptionHelpFormatter)
    parser.add_argument("categories", nargs="*", metavar="CATEGORY", help="categories to scrape [default: all]")
    parser.add_argument("-a", "--all", dest="all", action="store_true", help="scrape all categories")
    parser.add_argument("-l", "--limit", dest="limit", type=int, help="limit the number of records per category, not applicable to bosses [default: %(default)s]", metavar="NUM")
    parser.add_argument("-o", "--outdir", dest="outdir", help="path to output folder [default: settings OUTPATH]", metavar="path")
    parser.add_argument("-b", "--bosses-file", dest="bosses_file", help="JSON boss roster to use [default: bundled roster]", metavar="path")
    parser.add_argument("-s", "--spider", dest="spider", help="the spider to run [default: %(default)s]", metavar="NAME")
    parser.add_argument("--list-spiders", dest="list_spiders", action='store_true', help="list known spiders and exit")
    parser.add_argument("--headed", dest="headed", action="store_true", help="show the browser window")
    parser.add_argument("-v", "--verbose", dest="verbose", action="count", default=0, help="set verbosity level [default: %(default)s]")
    parser.add_argument('-V', '--version', action='version', version=program_version_message)
    parser.set_defaults(spider="wowhead")
    return parser


def main(argv=None):  # IGNORE:C0111
    try:
        args = build_parser().parse_intermixed_args(argv)

        if args.list_spiders:
            spiders_list = ["   {} -> {}".format(s['name'], s['target_domain']) for s in __g_spiders]
            print("List of known spiders: {0}".format(os.linesep))
            print(", ".join(spiders_list))
            return 0

        spiders = dict((s["name"], s["class"]) for s in __g_spiders)
        if args.spider not in spiders:
            raise CLIError("Unknown spider: {} (known spiders: {})".format(args.spider, ", ".join(spiders)))

        if args.limit is not None and args.limit < 1:
            raise CLIError("Limit must be a positive number, got {}".format(args.limit))

        categories = select_categories(args.categories, args.all)

        settings = get_settings()
        if DEBUG > 0 or args.verbose > 0:
            settings.set("LOG_LEVEL", "DEBUG", priority='cmdline')
        if args.outdir:
            settings.set("OUTPATH", args.outdir, priority='cmdline')
        if args.bosses_file:
            settings.set("BOSSES_FILE", args.bosses_file, priority='cmdline')
        if args.headed:
            settings.set("HEADLESS", False, priority='cmdline')

        configure_logging(settings)

        logger.info("Categories: %s", ", ".join(categories))
        logger.info("Limit: %s", args.limit if args.limit else "None")

        spider = spiders[args.spider].from_settings(settings)
        scraper = Scraper(settings, spider=spider, session=BrowserSession.from_settings(settings))
        written = scraper.run(categories, args.limit)

        print("All done! {} file(s) written to {}.".format(len(written), settings.get('OUTPATH')))
        return 0
    except KeyboardInterrupt:
        # the scraper closes the browser on its way out
        return 0
    except CLIError as e:
        print(e)
        return 1
    except BrowserLaunchError as e:
        sys.stderr.write("{0}: {1}{2}".format(os.path.basename(sys.argv[0]), str(e), os.linesep))
        return 1
    except Exception as e:
        if DEBUG:
            raise
        sys.stderr.write("{0}: {1}{2}".format(os.path.basename(sys.argv[0]), str(e), os.linesep))
        sys.stderr.write("\t for help use --help{0}".format(os.linesep))
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
