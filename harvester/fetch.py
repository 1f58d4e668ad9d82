# harvester/fetch.py
import time

import httpx

from .utils import logger

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; CatalogHarvester/1.0)"


class PageFetcher:
    """One bounded-timeout GET per call over a shared, thread-safe client.

    ``timeout`` bounds the whole request, body included: a server trickling
    bytes past the deadline fails with ``httpx.ReadTimeout``. No retries happen
    here. ``httpx.TransportError`` (connect errors, timeouts) and
    ``httpx.HTTPStatusError`` (any non-2xx status) propagate to the caller.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = DEFAULT_USER_AGENT, transport=None):
        self.timeout = timeout
        self.client = httpx.Client(
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
        )

    def fetch(self, url: str) -> bytes:
        logger.debug("Fetching %s", url)
        deadline = time.monotonic() + self.timeout
        with self.client.stream("GET", url) as response:
            response.raise_for_status()
            chunks = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"no complete response within {self.timeout}s", request=response.request
                    )
        return b"".join(chunks)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
