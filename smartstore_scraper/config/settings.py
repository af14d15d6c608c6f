# smartstore_scraper/config/settings.py

"""Central configuration for the smartstore scraper."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the smartstore scraper."""

    # --- Storefront ---
    SOURCE_NAME: str = "smartstore"
    STOREFRONT_ROOT: str = "https://smartstore.naver.com"
    STOREFRONT_HOSTS: list[str] = [
        "smartstore.naver.com",
        "m.smartstore.naver.com",
    ]
    PRODUCT_SEGMENT: str = "products"
    MAX_URL_LENGTH: int = 2000

    # --- Fetching ---
    REQUEST_TIMEOUT: float = 15.0       # Seconds before an attempt times out
    MAX_RETRIES: int = 3                # Retries after the first attempt
    RETRY_DELAY: float = 2.0            # Base backoff between attempts
    SESSION_TIMEOUT: float = 10.0       # Pre-warm request timeout
    SESSION_SETTLE_DELAY: float = 0.5   # Pause after a pre-warm request

    # --- Batch ---
    BATCH_DELAY: float = 3.0            # Seconds between batch items

    # --- Extraction ---
    MAX_IMAGES: int = 10
    MAX_DESCRIPTION_LENGTH: int = 500
    CURRENCY: str = "KRW"
    OUT_OF_STOCK_PHRASES: list[str] = [
        "품절",
        "일시품절",
        "재고없음",
        "재고 없음",
        "판매중지",
        "판매종료",
        "out of stock",
        "sold out",
        "unavailable",
    ]

    # --- Anti-blocking ---
    MIN_CONTENT_LENGTH: int = 1000
    BLOCKING_KEYWORDS: list[str] = [
        "captcha",
        "blocked",
        "access denied",
        "robot",
        "bot detection",
        "too many requests",
        "차단",
        "접근 제한",
        "로봇",
    ]
    DEFAULT_IMPERSONATE: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8,"
            "application/signed-exchange;v=b3;q=0.7"
        ),
        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
        "DNT": "1",
    }

    # --- Browser fallback (env driven) ---
    PROXY_SERVER: str = os.getenv("PROXY_SERVER", "")
    PROXY_USERNAME: str = os.getenv("PROXY_USERNAME", "")
    PROXY_PASSWORD: str = os.getenv("PROXY_PASSWORD", "")
    BROWSER_CDP_SERVER: str = os.getenv("BROWSER_CDP_SERVER", "")
    BROWSER_HEADLESS: bool = (
        os.getenv("BROWSER_HEADLESS", "true").lower() != "false"
    )
    BROWSER_TIMEOUT: float = 30.0
    BROWSER_DEVICE: str = "Pixel 7"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = (
        BASE_DIR / "smartstore_scraper" / "config" / "selectors.json"
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("SMARTSTORE_LOG_LEVEL", "WARNING").upper()
    LOG_RETENTION: int = 20             # Run logs kept in LOGS_DIR
