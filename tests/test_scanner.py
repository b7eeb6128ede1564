import threading
import time

import pytest
import requests

from conftest import MockResponse
from gcpenum.config import ScanConfig
from gcpenum.lister import ListingResult
from gcpenum.prober import Outcome, ProbeResult
from gcpenum.scanner import Scanner, format_probe

API = "https://www.googleapis.com/storage/v1/b"


def mocked_endpoint(routes, calls=None):
    def mock_get(url, timeout):
        if calls is not None:
            calls.append(url)
        return routes.get(url, MockResponse(404))
    return mock_get


def test_not_found_emits_nothing(monkeypatch, config):
    monkeypatch.setattr("requests.get", mocked_endpoint({}))
    assert list(Scanner(config).scan(["ghost"])) == []


def test_listable_bucket_lines_in_order(monkeypatch, config):
    routes = {
        f"{API}/open": MockResponse(200, "{}"),
        f"{API}/open/o": MockResponse(200, payload={"items": [{"name": "a.txt"}, {"name": "b.txt"}]}),
    }
    monkeypatch.setattr("requests.get", mocked_endpoint(routes))

    lines = list(Scanner(config).scan(["open", "ghost"]))
    assert lines == [
        "EXISTS: https://storage.googleapis.com/open/",
        "    LISTABLE: open",
        "        - a.txt",
        "        - b.txt",
    ]


def test_forbidden_classification(monkeypatch, config):
    calls = []
    routes = {
        f"{API}/denied": MockResponse(403, "Access denied."),
        f"{API}/restricted": MockResponse(403, "Forbidden"),
    }
    monkeypatch.setattr("requests.get", mocked_endpoint(routes, calls))

    lines = list(Scanner(config).scan(["denied", "restricted"]))
    assert lines == ["EXISTS: https://storage.googleapis.com/restricted/"]
    assert f"{API}/restricted/o" not in calls


def test_listing_error_keeps_exists_line(monkeypatch, config):
    routes = {
        f"{API}/broken": MockResponse(200, "{}"),
        f"{API}/broken/o": MockResponse(200, "not json"),
    }
    monkeypatch.setattr("requests.get", mocked_endpoint(routes))

    lines = list(Scanner(config).scan(["broken"]))
    assert lines[0] == "EXISTS: https://storage.googleapis.com/broken/"
    assert len(lines) == 2
    assert lines[1].startswith("ERROR: Could not parse object list for broken - ")


def test_unknown_status_only_in_verbose(monkeypatch):
    monkeypatch.setattr("requests.get", mocked_endpoint({f"{API}/odd": MockResponse(500)}))

    assert list(Scanner(ScanConfig(verbose=False)).scan(["odd"])) == []
    assert list(Scanner(ScanConfig(verbose=True)).scan(["odd"])) == [
        "UNKNOWN RESPONSE for https://storage.googleapis.com/odd/: 500"
    ]


def test_every_probe_failing_still_terminates(monkeypatch, config):
    def mock_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("requests.get", mock_get)
    names = [f"bucket-{i}" for i in range(25)]
    lines = list(Scanner(config).scan(names))

    assert len(lines) == 25
    assert all(line.startswith("ERROR: Could not connect to ") for line in lines)
    assert {line.split(" - ")[0].rsplit("/", 1)[1] for line in lines} == set(names)


def test_empty_candidate_list():
    assert list(Scanner().scan([])) == []


def test_unexpected_failure_is_reported_and_scan_continues(config):
    def probe(bucket, config):
        if bucket == "bad":
            raise RuntimeError("boom")
        return ProbeResult(bucket, Outcome.EXISTS_RESTRICTED, status=403)

    lines = sorted(Scanner(config, probe=probe).scan(["bad", "good"]))
    assert lines == [
        "ERROR: Unexpected failure while scanning bad - boom",
        "EXISTS: https://storage.googleapis.com/good/",
    ]


def test_lines_of_one_bucket_stay_together():
    def probe(bucket, config):
        time.sleep(0.001)
        return ProbeResult(bucket, Outcome.EXISTS_LISTABLE, status=200)

    def lister(bucket, config):
        time.sleep(0.001)
        return ListingResult(bucket, objects=[f"{bucket}/{i}" for i in range(5)])

    names = [f"b{i}" for i in range(40)]
    lines = list(Scanner(ScanConfig(concurrency=8), probe=probe, lister=lister).scan(names))

    assert len(lines) == 40 * 7
    for start in range(0, len(lines), 7):
        group = lines[start:start + 7]
        bucket = group[0].rsplit("/", 2)[1]
        assert group[0] == f"EXISTS: https://storage.googleapis.com/{bucket}/"
        assert group[1] == f"    LISTABLE: {bucket}"
        assert group[2:] == [f"        - {bucket}/{i}" for i in range(5)]


class CountingSemaphore:
    def __init__(self, value):
        self._sem = threading.BoundedSemaphore(value)
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def __enter__(self):
        self._sem.acquire()
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        return self

    def __exit__(self, *exc):
        with self._lock:
            self.active -= 1
        self._sem.release()


@pytest.mark.parametrize("concurrency", [1, 3, 10])
def test_permits_bound_in_flight_probes(concurrency):
    def probe(bucket, config):
        time.sleep(0.005)
        return ProbeResult(bucket, Outcome.NOT_FOUND, status=404)

    scanner = Scanner(ScanConfig(concurrency=concurrency), probe=probe)
    scanner.permits = CountingSemaphore(concurrency)
    assert list(scanner.scan([f"n{i}" for i in range(30)])) == []

    assert 1 <= scanner.permits.peak <= concurrency
    assert scanner.permits.active == 0


def test_permit_released_after_failure(config):
    def probe(bucket, config):
        raise RuntimeError("boom")

    scanner = Scanner(config, probe=probe)
    scanner.permits = CountingSemaphore(config.concurrency)
    list(scanner.scan(["a", "b", "c"]))
    assert scanner.permits.active == 0


def test_invalid_concurrency():
    with pytest.raises(ValueError):
        ScanConfig(concurrency=0)


@pytest.mark.parametrize("timeout", [0, -2.5])
def test_invalid_timeout(timeout):
    with pytest.raises(ValueError):
        ScanConfig(timeout=timeout)


def test_timeout_can_be_disabled():
    assert ScanConfig(timeout=None).timeout is None


def test_format_probe_not_found_is_silent(config):
    assert format_probe(ProbeResult("x", Outcome.NOT_FOUND, status=404), config) == []
