import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(APP_DIR, 'data')
CONFIG_DIR = os.path.join(APP_DIR, 'config')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')
CACHE_DIR = os.path.join(DATA_DIR, 'cache')
CATALOG_CACHE_FILE = os.path.join(CACHE_DIR, 'catalog.json')

BUILD_VERSION = '20261018_0930'

# Published roster of garden businesses
BUSINESS_SHEET_URL = (
    'https://docs.google.com/spreadsheets/d/e/'
    '2PACX-1vS7mWDvhN5qEC2XTKt3sEXWi2lPNLCRT0zNFEUGd1xjMqNkPyiXE8OIcM-duZ-6U6NGzCQrRMSJ1pD9/pub?output=csv'
)

CSV_ACCEPT_HEADER = 'text/csv, text/plain, */*'

BUSINESS_MIN_COLUMNS = 14
PRODUCT_MIN_COLUMNS = 6

DEFAULT_CATEGORY = 'Other'
ACTIVE_STATUS = 'active'
IN_STOCK_TEXT = 'in stock'

# Storage keys
BUSINESSES_KEY = 'businesses'
PRODUCTS_KEY_PREFIX = 'products_'
TIME_KEY_SUFFIX = '_time'

# Google Drive
DRIVE_HOST = 'drive.google.com'
DRIVE_THUMBNAIL_URL = 'https://drive.google.com/thumbnail?id={file_id}&sz={size}'
DRIVE_UC_VIEW_URL = 'https://drive.google.com/uc?export=view&id={file_id}'
DRIVE_THUMBNAIL_SIZE = 'w1000'

IMAGE_PROXY_PATH = '/api/image-proxy'
IMAGE_PLACEHOLDER = '/images/placeholder.svg'
CARD_PLACEHOLDER = '/images/store-placeholder.svg'

PROXY_CHUNK_SIZE = 8192

DEFAULT_SETTINGS = {
    "catalog": {
        "business_sheet_url": BUSINESS_SHEET_URL,
        "stale_time": 1800,
        "request_timeout": 15,
    },
    "storage": {
        "backend": "redis",
        "redis_url": "redis://localhost:6379/0",
        "file_path": CATALOG_CACHE_FILE,
    },
    "images": {
        "proxy_timeout": 20,
        "probe_timeout": 10,
        "placeholder": IMAGE_PLACEHOLDER,
        "card_placeholder": CARD_PLACEHOLDER,
    },
}
