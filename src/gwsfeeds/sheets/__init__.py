"""
Classes to facilitate working with the legacy Google Sheets feeds
"""

GOOGLE_FEED_URL = "https://spreadsheets.google.com/feeds/"

# projection / visibility pairs the feeds accept
VISIBILITIES = ('public', 'private')
PROJECTIONS = ('values', 'full')
