import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(APP_DIR, 'data')
CONFIG_DIR = os.path.join(APP_DIR, 'config')
DB_FILE = os.path.join(CONFIG_DIR, 'article_groups.db')
CONFIG_FILE = os.environ.get('ARTICLE_GROUPS_CONFIG', os.path.join(CONFIG_DIR, 'settings.yaml'))
OBJECT_STORE_DIR = os.path.join(DATA_DIR, 'objects')

ARTICLE_GROUPS_DB = 'sqlite:///' + DB_FILE

# Object store keys
LAYOUTS_SOURCE_KEY = 'sys-system-layouts.json'
MENUS_LOV_KEY = 'sys-menus-lov.json'
COMBINED_LAYOUT_FILE = 'layout.js'
DEFAULT_LAYOUT_FILE = 'layout.js'

# Flag families
HIGHLIGHT_FLAG_COUNT = 9
ARTICLEGROUP_FLAG_COUNT = 9
FLAG_YES = 'Yes'
FLAG_NO = 'No'

HIGHLIGHT_LAYOUT_PREFIX = 'Highlight'
ARTICLEGROUP_LAYOUT_PREFIX = 'ArticleGroup'
RESERVED_LAYOUT_PREFIX = 'menu'

HIGHLIGHT_FLAGS = [f'highlight{i}_flag' for i in range(1, HIGHLIGHT_FLAG_COUNT + 1)]
ARTICLEGROUP_FLAGS = [f'articlegroup{i}_flag' for i in range(1, ARTICLEGROUP_FLAG_COUNT + 1)]
ALL_FLAGS = HIGHLIGHT_FLAGS + ARTICLEGROUP_FLAGS

# Descriptive columns mirrored from the articles record store
MIRROR_FIELDS = [
    'issue_date',
    'starting_date',
    'ending_date',
    'sub_menu_id',
    'menu',
    'heading',
    'body',
    'picture_location',
    'picture2_location',
    'by_line',
    'unique_file',
    'active',
    'created_by',
    'creation_date',
    'last_updated_by',
    'last_update_date',
]

# Cache names and TTLs (seconds)
LAYOUT_CACHE_KEY = 'layout_config'
ITEMS_CACHE_KEY = 'classified_items'
TABLE_CACHE_KEY = 'table_exists'

LAYOUT_CACHE_TTL = 300
ITEMS_CACHE_TTL = 60
TABLE_CACHE_TTL = 600

CONTENT_TYPES = {
    'js': 'application/javascript',
    'xml': 'application/xml',
    'json': 'application/json',
    'rss': 'application/rss+xml',
    'html': 'text/html',
    'htm': 'text/html',
}
DEFAULT_CONTENT_TYPE = 'application/octet-stream'
SCRIPT_EXTENSIONS = ['js']

DEFAULT_SETTINGS = {
    "storage": {
        "object_store_dir": OBJECT_STORE_DIR,
    },
    "database": {
        "uri": ARTICLE_GROUPS_DB,
    },
    "layouts": {
        "source_key": LAYOUTS_SOURCE_KEY,
        "menus_lov_key": MENUS_LOV_KEY,
        "combined_file": COMBINED_LAYOUT_FILE,
        "default_file": DEFAULT_LAYOUT_FILE,
        "reserved_prefix": RESERVED_LAYOUT_PREFIX,
    },
    "cache": {
        "layout_ttl": LAYOUT_CACHE_TTL,
        "items_ttl": ITEMS_CACHE_TTL,
        "table_ttl": TABLE_CACHE_TTL,
    },
    "render": {
        "after_classification": True,
    },
}
