"""
Runtime configuration

Settings are read from the environment (a local .env file is loaded first):
1. API_URL - order backend base URL
2. ORDER_REQUEST_TIMEOUT - ceiling for the order-creation call, in seconds
3. EMAILJS_* - confirmation mail credentials
4. AUTH_MODE / FIREBASE_API_KEY - phone login provider
5. RAZORPAY_KEY_ID - payment checkout key
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables
load_dotenv()

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseModel):
    """Service configuration"""
    api_url: str = "http://localhost:5001/api"
    order_request_timeout: float = 30.0
    db_path: Path = DATA_DIR / "storefront.db"

    emailjs_service_id: str = ""
    emailjs_template_id: str = ""
    emailjs_public_key: str = ""
    emailjs_endpoint: str = "https://api.emailjs.com/api/v1.0/email/send"

    auth_mode: str = "mock"  # "mock" | "firebase"
    firebase_api_key: Optional[str] = None

    razorpay_key_id: str = "rzp_test_1234567890abcdef"
    shop_name: str = "Homemade Foods"
    currency: str = "INR"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            api_url=os.getenv("API_URL", defaults.api_url).rstrip("/"),
            order_request_timeout=float(os.getenv("ORDER_REQUEST_TIMEOUT", defaults.order_request_timeout)),
            db_path=Path(os.getenv("DB_PATH", str(defaults.db_path))),
            emailjs_service_id=os.getenv("EMAILJS_SERVICE_ID", ""),
            emailjs_template_id=os.getenv("EMAILJS_TEMPLATE_ID", ""),
            emailjs_public_key=os.getenv("EMAILJS_PUBLIC_KEY", ""),
            auth_mode=os.getenv("AUTH_MODE", defaults.auth_mode).lower(),
            firebase_api_key=os.getenv("FIREBASE_API_KEY"),
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID", defaults.razorpay_key_id),
            shop_name=os.getenv("SHOP_NAME", defaults.shop_name),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )

    @property
    def emailjs_configured(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)


@lru_cache
def get_settings() -> Settings:
    """Get the global settings (cached)"""
    return Settings.from_env()
