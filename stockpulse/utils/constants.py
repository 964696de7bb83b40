"""Market time constants for StockPulse.

Polling intervals and the dashboard's tickers are configured via
``stockpulse.config.AppConfig`` and loaded from environment variables /
``.env`` file. Only truly static market timing constants live here.
"""

from datetime import time
from zoneinfo import ZoneInfo

# Timezone
EXCHANGE_TIMEZONE = "America/New_York"
ET = ZoneInfo(EXCHANGE_TIMEZONE)
ET_LABEL = "ET"

# Regular session (ET). The final capture window is the single minute after close.
MARKET_OPEN = time(9, 30)
MARKET_CLOSE = time(16, 30)

# Polling intervals (milliseconds)
PRICE_INTERVAL_LIVE_MS = 60_000
NEWS_INTERVAL_OPEN_MS = 15 * 60 * 1000
NEWS_INTERVAL_CLOSED_MS = 2 * 60 * 60 * 1000

# Scheduler
SCHEDULER_FALLBACK_MS = 60_000
MAX_LOOKAHEAD_DAYS = 14
TRANSITION_JOB_KEY = "market_state_change"
PRICE_POLL_JOB_ID = "price_poll"
NEWS_POLL_JOB_ID = "news_poll"

# Data sources
DEFAULT_TICKERS = ("TSLA", "OKLO")
FETCH_MAX_RETRIES = 3
