# smartstore_scraper/models/client_identity.py

"""Browser fingerprint presented to the storefront."""

from dataclasses import dataclass

from curl_cffi.requests import BrowserTypeLiteral


@dataclass(frozen=True)
class ClientIdentity:
    """A user-agent plus the client hints and TLS profile that match it."""

    name: str
    user_agent: str
    impersonate: BrowserTypeLiteral
    platform: str = '"Windows"'
    sec_ch_ua: str = ""

    def headers(self, base: dict[str, str]) -> dict[str, str]:
        """Merge this identity onto a base header set."""
        headers = {**base, "User-Agent": self.user_agent}
        # Firefox and Safari do not send client hints
        if self.sec_ch_ua:
            headers["sec-ch-ua"] = self.sec_ch_ua
            headers["sec-ch-ua-mobile"] = "?0"
            headers["sec-ch-ua-platform"] = self.platform
        return headers
