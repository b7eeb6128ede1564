"""
Object index retrieval for buckets that answered the probe with 200.

Only the first page is fetched; a response carrying a nextPageToken is
reported as-is.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from gcpenum.config import ScanConfig

logger = logging.getLogger(__name__)


@dataclass
class ListingResult:
    bucket: str
    objects: list = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def list_objects(bucket: str, config: ScanConfig) -> ListingResult:
    url = config.objects_url(bucket)
    try:
        r = requests.get(url, timeout=config.timeout)
    except requests.RequestException as e:
        return ListingResult(bucket, error=f"Could not list objects in {bucket} - {e}")

    if r.status_code != 200:
        return ListingResult(bucket, error=f"Could not list objects in {bucket} - HTTP status {r.status_code}")

    try:
        payload = r.json()
        items = payload.get("items", []) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ValueError("'items' is not an array")
        objects = [item["name"] for item in items]
    except (ValueError, KeyError, TypeError) as e:
        return ListingResult(bucket, error=f"Could not parse object list for {bucket} - {e}")

    if isinstance(payload, dict) and payload.get("nextPageToken"):
        logger.debug("object listing for %s is truncated", bucket)
    return ListingResult(bucket, objects=objects)
