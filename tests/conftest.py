import copy
import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "app" / "fixtures"

with open(FIXTURES_DIR / "flickr_feed_response.json") as f:
    FLICKR_FEED_RESPONSE = json.load(f)


@pytest.fixture
def feed_data():
    """Fresh copy of a real public feed response with three items"""
    return copy.deepcopy(FLICKR_FEED_RESPONSE)


@pytest.fixture
def feed_payload(feed_data):
    """The feed response as the raw bytes the transport returns"""
    return json.dumps(feed_data).encode()
