# smartstore_scraper/scrapers/client_identity.py

"""Round-robin rotation over a fixed pool of browser identities."""

import itertools

from smartstore_scraper.models.client_identity import ClientIdentity

# Each user-agent is paired with the curl_cffi TLS profile of the same
# browser so the handshake and the headers tell the same story.
IDENTITY_POOL: tuple[ClientIdentity, ...] = (
    ClientIdentity(
        name="chrome-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        impersonate="chrome131",
        platform='"Windows"',
        sec_ch_ua=(
            '"Google Chrome";v="131", '
            '"Chromium";v="131", "Not_A Brand";v="24"'
        ),
    ),
    ClientIdentity(
        name="chrome-macos",
        user_agent=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/124.0.0.0 Safari/537.36"
        ),
        impersonate="chrome124",
        platform='"macOS"',
        sec_ch_ua=(
            '"Chromium";v="124", '
            '"Google Chrome";v="124", "Not-A.Brand";v="99"'
        ),
    ),
    ClientIdentity(
        name="edge-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/101.0.4951.64 Safari/537.36 "
            "Edg/101.0.1210.47"
        ),
        impersonate="edge101",
        platform='"Windows"',
        sec_ch_ua=(
            '" Not A;Brand";v="99", '
            '"Chromium";v="101", "Microsoft Edge";v="101"'
        ),
    ),
    ClientIdentity(
        name="firefox-windows",
        user_agent=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; "
            "rv:133.0) Gecko/20100101 Firefox/133.0"
        ),
        impersonate="firefox133",
    ),
    ClientIdentity(
        name="safari-macos",
        user_agent=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.0 Safari/605.1.15"
        ),
        impersonate="safari17_0",
        platform='"macOS"',
    ),
)


class IdentityRotator:
    """Hands out identities from a pool in round-robin order.

    ``next(itertools.count)`` is atomic under the GIL, so concurrent
    callers each get a distinct cursor value without a lock.
    """

    def __init__(
        self,
        pool: tuple[ClientIdentity, ...] = IDENTITY_POOL,
    ) -> None:
        if not pool:
            msg = "identity pool must not be empty"
            raise ValueError(msg)
        self._pool = pool
        self._counter = itertools.count()
        self._issued = 0

    def next(self) -> ClientIdentity:
        """Return the next identity and advance the cursor."""
        index = next(self._counter)
        self._issued = index + 1
        return self._pool[index % len(self._pool)]

    def peek(self) -> ClientIdentity:
        """Return the identity the next call would hand out."""
        return self._pool[self._issued % len(self._pool)]

    def stats(self) -> dict[str, object]:
        """Current rotation state, for diagnostics."""
        position = self._issued % len(self._pool)
        return {
            "user_agent": self._pool[position].user_agent,
            "identity": self._pool[position].name,
            "next_rotation": (len(self._pool) - position)
            % len(self._pool),
            "pool_size": len(self._pool),
        }
