import json

import pytest

from gcpenum.config import ScanConfig


class MockResponse:
    def __init__(self, status_code=200, text="", payload=None):
        self.status_code = status_code
        self.text = text if payload is None else json.dumps(payload)
        self.content = self.text.encode()

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def config():
    return ScanConfig(concurrency=4, timeout=1)
