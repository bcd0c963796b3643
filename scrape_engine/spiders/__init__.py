# This package contains the site adapters of the scrape_engine project.
# Each one knows a site's URLs and markup and hands plain items to the crawler.
