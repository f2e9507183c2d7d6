"""
Phone login

Usage:
1. AUTH_MODE=mock (default) - login(phone) signs the shopper in directly
2. AUTH_MODE=firebase - send_code(phone) then verify_code(session, code)
   through Firebase phone authentication; needs FIREBASE_API_KEY

The rest of the service only asks whether a user is present and which phone
number they signed in with.
"""
import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import BaseModel

from storefront.config import Settings, get_settings
from storefront.errors import AuthError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

FIREBASE_ERROR_MESSAGES = {
    "INVALID_PHONE_NUMBER": "Invalid phone number format. Please use international format (e.g., +919876543210)",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many requests. Please try again later.",
    "QUOTA_EXCEEDED": "SMS quota exceeded. Please contact support.",
    "CAPTCHA_CHECK_FAILED": "reCAPTCHA verification failed. Please refresh and try again.",
    "MISSING_PHONE_NUMBER": "Phone number is required.",
    "API_KEY_INVALID": "Firebase API key is invalid. Please check your Firebase configuration.",
    "INVALID_CODE": "Invalid OTP. Please check the code and try again.",
    "INVALID_SESSION_INFO": "Verification session is invalid. Please request a new OTP.",
    "SESSION_EXPIRED": "OTP has expired. Please request a new one.",
    "CODE_EXPIRED": "OTP has expired. Please request a new one.",
}


class User(BaseModel):
    uid: str
    phone_number: Optional[str] = None
    display_name: Optional[str] = None


class VerificationSession(BaseModel):
    """Pending OTP verification"""
    phone_number: str
    session_info: str


def validate_phone_number(phone_number: str) -> Optional[str]:
    """International format check, returns an error message or None"""
    if not phone_number or not phone_number.strip():
        return "Phone number is required"
    if not phone_number.startswith("+"):
        return "Phone number must include country code (e.g., +91 for India)"
    if len(re.sub(r"[^0-9]", "", phone_number)) < 10:
        return "Phone number must be at least 10 digits"
    return None


class AuthProvider(ABC):
    """Login provider base class"""

    @abstractmethod
    async def login(self, phone_number: str) -> User:
        """Sign in without an OTP round-trip"""
        pass

    @abstractmethod
    async def send_code(self, phone_number: str, recaptcha_token: Optional[str] = None) -> VerificationSession:
        """Send an OTP to the phone"""
        pass

    @abstractmethod
    async def verify_code(self, session: VerificationSession, code: str) -> User:
        """Confirm the OTP"""
        pass


class MockAuthProvider(AuthProvider):
    """Local login that trusts the phone number"""

    async def login(self, phone_number: str) -> User:
        return User(uid=f"user_{int(time.time() * 1000)}", phone_number=phone_number)

    async def send_code(self, phone_number: str, recaptcha_token: Optional[str] = None) -> VerificationSession:
        error = validate_phone_number(phone_number)
        if error:
            raise AuthError(error)
        return VerificationSession(phone_number=phone_number, session_info=f"mock_{int(time.time() * 1000)}")

    async def verify_code(self, session: VerificationSession, code: str) -> User:
        if not re.fullmatch(r"[0-9]{6}", code or ""):
            raise AuthError("Please enter the 6-digit OTP")
        return await self.login(session.phone_number)


class FirebaseOtpProvider(AuthProvider):
    """Firebase phone authentication over the Identity Toolkit REST API"""

    def __init__(self, api_key: str, timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        if not api_key:
            raise ValueError("FIREBASE_API_KEY not set")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def _call(self, method: str, payload: dict) -> dict:
        url = f"{IDENTITY_TOOLKIT_URL}/accounts:{method}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.TransportError as e:
            logger.error("[Auth] %s unreachable: %s", method, e)
            raise AuthError("Network error. Please check your connection.") from e

        if response.is_success:
            return response.json()

        try:
            code = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            code = ""
        # Firebase appends details after " : "
        code = code.split(" ")[0]
        logger.error("[Auth] %s failed: %s", method, code or response.status_code)
        raise AuthError(FIREBASE_ERROR_MESSAGES.get(code, "Authentication failed. Please try again."))

    async def login(self, phone_number: str) -> User:
        raise AuthError("Phone login requires OTP verification")

    async def send_code(self, phone_number: str, recaptcha_token: Optional[str] = None) -> VerificationSession:
        error = validate_phone_number(phone_number)
        if error:
            raise AuthError(error)

        payload = {"phoneNumber": phone_number}
        if recaptcha_token:
            payload["recaptchaToken"] = recaptcha_token
        body = await self._call("sendVerificationCode", payload)
        logger.info("[Auth] OTP sent to %s", phone_number)
        return VerificationSession(phone_number=phone_number, session_info=body["sessionInfo"])

    async def verify_code(self, session: VerificationSession, code: str) -> User:
        if not code or not code.strip():
            raise AuthError("Please enter the OTP")
        body = await self._call("signInWithPhoneNumber", {
            "sessionInfo": session.session_info,
            "code": code.strip(),
        })
        return User(uid=body["localId"], phone_number=body.get("phoneNumber", session.phone_number))


def get_auth_provider(settings: Optional[Settings] = None) -> AuthProvider:
    """Pick the provider from AUTH_MODE"""
    settings = settings or get_settings()
    if settings.auth_mode == "firebase":
        return FirebaseOtpProvider(settings.firebase_api_key or "")
    return MockAuthProvider()


class AuthSession:
    """Current shopper's login"""

    def __init__(self):
        self.user: Optional[User] = None
        self.pending: Optional[VerificationSession] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def phone_number(self) -> Optional[str]:
        return self.user.phone_number if self.user else None

    async def login(self, provider: AuthProvider, phone_number: str) -> User:
        self.user = await provider.login(phone_number)
        logger.info("[Auth] signed in %s", self.user.uid)
        return self.user

    async def send_code(self, provider: AuthProvider, phone_number: str,
                        recaptcha_token: Optional[str] = None) -> VerificationSession:
        self.pending = await provider.send_code(phone_number, recaptcha_token)
        return self.pending

    async def verify_code(self, provider: AuthProvider, code: str) -> User:
        if self.pending is None:
            raise AuthError("No OTP has been requested for this session")
        self.user = await provider.verify_code(self.pending, code)
        self.pending = None
        logger.info("[Auth] verified %s", self.user.uid)
        return self.user

    def logout(self) -> None:
        self.user = None
        self.pending = None
