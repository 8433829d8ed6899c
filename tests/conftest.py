"""
Pytest fixtures and configuration for storefront tests
"""
import copy
import os
import sys
import pytest
from unittest.mock import MagicMock

# Add app directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'app'))

from constants import DEFAULT_SETTINGS
from exceptions import FetchError
from persistent_store import MemoryStore


BUSINESS_SHEET = "https://sheets.example.com/businesses.csv"
ROSE_SHEET = "https://sheets.example.com/rose.csv"
ORCHID_SHEET = "https://sheets.example.com/orchid.csv"

BUSINESS_HEADER = (
    "Name,Owner,Address,Phone,WhatsApp,Email,Delivery,Delivery Area,Hours,Special Hours,"
    "Profile Picture,Product Sheet,Status,Bio,Map,Delivery Cost,Island Wide,Island Wide Cost"
)


class FakeFetcher:
    """CSV fetcher double serving canned text per URL"""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def fetch_text(self, url):
        self.calls.append(url)
        result = self.responses.get(url)
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise FetchError(f"Failed to load {url}: 404 Not Found", status_code=404)
        return result


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = MagicMock()
    logger.info = MagicMock()
    logger.error = MagicMock()
    logger.warning = MagicMock()
    logger.debug = MagicMock()
    return logger


@pytest.fixture
def business_csv():
    """Roster with two visible businesses and several that must be dropped"""
    return "\n".join([
        BUSINESS_HEADER,
        'Rose Garden,Alice Perera,"12, Temple Road",0771234567,0771234567,alice@example.com,Yes,Colombo,'
        '8am-6pm,Closed Sundays,https://drive.google.com/file/d/ROSE123/view?usp=sharing,'
        f'{ROSE_SHEET},Active,"Roses and ""rare"" blooms",6.9271;79.8612,250,Yes,1000',
        f'Orchid  Corner,Bob,Kandy,0712,0712,bob@example.com,no,,9-5,,https://example.com/orchid.jpg,{ORCHID_SHEET},ACTIVE,Orchids',
        f'Lily Pad,Carol,Galle,0700,0700,carol@example.com,yes,Galle,9-5,,https://example.com/lily.jpg,{ROSE_SHEET},inactive,Lilies',
        f'Fern House,Dan,Jaffna,0701,0701,dan@example.com,yes,Jaffna,9-5,,,{ROSE_SHEET},active,Ferns',
        'Short Row,Eve,Matara',
        '',
    ])


@pytest.fixture
def product_csv():
    """Product sheet with two categories and one short row"""
    return "\n".join([
        "Name,Category,Price,Description,Image,Stock",
        "Red Rose,Roses,1500,Deep red,https://drive.google.com/file/d/IMG1/view?usp=sharing,In Stock",
        "White Rose,Roses,abc,,https://example.com/white.jpg,Out of stock",
        'Cactus,,300 LKR,"Spiky, small",,IN STOCK',
        "Tiny,row",
    ])


@pytest.fixture
def fake_fetcher(business_csv, product_csv):
    return FakeFetcher({BUSINESS_SHEET: business_csv, ROSE_SHEET: product_csv})


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def test_settings(tmp_path):
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    settings["catalog"]["business_sheet_url"] = BUSINESS_SHEET
    settings["storage"]["backend"] = "memory"
    settings["storage"]["file_path"] = str(tmp_path / "catalog.json")
    return settings


@pytest.fixture
def flask_app(test_settings, memory_store, fake_fetcher):
    from app import create_app

    _app = create_app(settings=test_settings, store=memory_store, fetcher=fake_fetcher, http_session=MagicMock())
    _app.config.update({'TESTING': True})
    return _app


@pytest.fixture
def client(flask_app):
    """Provide a Flask test client for the application."""
    with flask_app.test_client() as client:
        with flask_app.app_context():
            yield client
