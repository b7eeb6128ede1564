"""
Existence and access-level check against a bucket's metadata endpoint.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from gcpenum.config import ScanConfig

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    NOT_FOUND = "not_found"
    EXISTS_RESTRICTED = "exists_restricted"
    EXISTS_LISTABLE = "exists_listable"
    UNKNOWN = "unknown"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class ProbeResult:
    bucket: str
    outcome: Outcome
    status: Optional[int] = None
    error: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.outcome in (Outcome.EXISTS_RESTRICTED, Outcome.EXISTS_LISTABLE)


def is_access_denied(body: str, phrases) -> bool:
    return any(phrase in body for phrase in phrases)


def probe_bucket(bucket: str, config: ScanConfig) -> ProbeResult:
    url = config.metadata_url(bucket)
    try:
        r = requests.get(url, timeout=config.timeout)
    except requests.RequestException as e:
        logger.debug("probe of %s failed: %s", bucket, e)
        return ProbeResult(bucket, Outcome.TRANSPORT_ERROR, error=str(e))

    logger.debug("probe of %s returned %d", bucket, r.status_code)
    if r.status_code == 404:
        return ProbeResult(bucket, Outcome.NOT_FOUND, status=404)
    if r.status_code == 403:
        if is_access_denied(r.text, config.denial_phrases):
            return ProbeResult(bucket, Outcome.NOT_FOUND, status=403)
        return ProbeResult(bucket, Outcome.EXISTS_RESTRICTED, status=403)
    if r.status_code == 200:
        return ProbeResult(bucket, Outcome.EXISTS_LISTABLE, status=200)
    return ProbeResult(bucket, Outcome.UNKNOWN, status=r.status_code)
