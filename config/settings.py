"""
config/settings.py
Central configuration. Reads from environment variables and .env file.
"""
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:

    def __init__(self):
        self._load()

    def _load(self):
        import os
        env_file = BASE_DIR / ".env"
        if env_file.exists():
            for line in env_file.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, _, val = line.partition("=")
                    os.environ.setdefault(key.strip(), val.strip())

        self.sqlite_db_path = os.environ.get(
            "SQLITE_DB_PATH", str(BASE_DIR / "data" / "charter.db")
        )

        self.api_host    = os.environ.get("API_HOST", "0.0.0.0")
        self.api_port    = int(os.environ.get("API_PORT", "8000"))
        self.api_title   = "Charter Quote API"
        self.api_version = "1.0.0"

        self.metrics_port = int(os.environ.get("METRICS_PORT", "9090"))
        self.log_level    = os.environ.get("LOG_LEVEL", "INFO")

        # Listings without a commission_rate are quoted at this rate
        self.default_commission_rate = int(os.environ.get("DEFAULT_COMMISSION_RATE", "0"))
        self.default_currency        = os.environ.get("DEFAULT_CURRENCY", "TRY")

        # "current" recomputes historical leads from today's catalog, "snapshot"
        # reports the quote stored at submission time
        self.report_pricing_basis = os.environ.get("REPORT_PRICING_BASIS", "current")

        # New-lead email (Resend)
        self.resend_api_key         = os.environ.get("RESEND_API_KEY", "")
        self.resend_api_url         = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
        self.notify_from            = os.environ.get("NOTIFY_FROM", "Charter Requests <onboarding@resend.dev>")
        self.notify_to              = [
            addr.strip()
            for addr in os.environ.get("NOTIFY_TO", "").split(",")
            if addr.strip()
        ]
        self.notify_timeout_seconds = float(os.environ.get("NOTIFY_TIMEOUT_SECONDS", "10"))


settings = Settings()
