"""
Concurrent scan engine.

A fixed pool of worker threads pulls candidate names from a work queue. Each
candidate is probed (and listed when readable) while holding one permit, and
its result lines are pushed onto the shared output queue as a single group so
that one bucket's EXISTS / LISTABLE / object lines are never split up by
another bucket's output. The caller drains the output queue through
:meth:`Scanner.scan`.
"""

import logging
import queue
import threading

from gcpenum.config import ScanConfig
from gcpenum.lister import ListingResult, list_objects
from gcpenum.prober import Outcome, ProbeResult, probe_bucket

logger = logging.getLogger(__name__)

_DONE = object()


def format_probe(result: ProbeResult, config: ScanConfig) -> list:
    if result.outcome == Outcome.TRANSPORT_ERROR:
        return [f"ERROR: Could not connect to {config.metadata_url(result.bucket)} - {result.error}"]
    if result.exists:
        return [f"EXISTS: {config.public_url(result.bucket)}"]
    if result.outcome == Outcome.UNKNOWN and config.verbose:
        return [f"UNKNOWN RESPONSE for {config.public_url(result.bucket)}: {result.status}"]
    return []


def format_listing(listing: ListingResult) -> list:
    if not listing.ok:
        return [f"ERROR: {listing.error}"]
    lines = [f"    LISTABLE: {listing.bucket}"]
    lines.extend(f"        - {name}" for name in listing.objects)
    return lines


class Scanner:
    def __init__(self, config: ScanConfig = None, probe=probe_bucket, lister=list_objects):
        self.config = config or ScanConfig()
        self.probe = probe
        self.lister = lister
        # Permit pool; replaceable so tests can observe how many probes run at once.
        self.permits = threading.BoundedSemaphore(self.config.concurrency)

    def check(self, bucket: str) -> list:
        """Probe one bucket and return its result lines in emission order."""
        result = self.probe(bucket, self.config)
        lines = format_probe(result, self.config)
        if result.outcome == Outcome.EXISTS_LISTABLE:
            listing = self.lister(bucket, self.config)
            lines.extend(format_listing(listing))
        return lines

    def _worker(self, work: queue.Queue, output: queue.Queue):
        try:
            while True:
                try:
                    bucket = work.get_nowait()
                except queue.Empty:
                    return
                with self.permits:
                    try:
                        lines = self.check(bucket)
                    except Exception as e:
                        logger.exception("unexpected failure while scanning %s", bucket)
                        lines = [f"ERROR: Unexpected failure while scanning {bucket} - {e}"]
                if lines:
                    output.put(lines)
        finally:
            output.put(_DONE)

    def scan(self, buckets):
        """
        Yield result lines for every bucket name until all of them are resolved.

        Lines of different buckets interleave in completion order; lines of one
        bucket are always yielded together.
        """
        work = queue.Queue()
        for bucket in buckets:
            work.put(bucket)

        workers = min(self.config.concurrency, work.qsize())
        output = queue.Queue()
        threads = []
        for _ in range(workers):
            t = threading.Thread(target=self._worker, args=(work, output))
            t.daemon = True
            t.start()
            threads.append(t)

        remaining = workers
        while remaining:
            item = output.get()
            if item is _DONE:
                remaining -= 1
                continue
            yield from item

        for t in threads:
            t.join()
