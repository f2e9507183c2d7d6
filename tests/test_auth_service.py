"""Phone login: mock provider, Firebase OTP over REST, session bookkeeping"""
import asyncio
import json

import httpx
import pytest

from storefront.auth_service import (
    AuthSession, FirebaseOtpProvider, MockAuthProvider, get_auth_provider, validate_phone_number
)
from storefront.config import Settings
from storefront.errors import AuthError


class FakeIdentityToolkit:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.error: str = ""

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            return httpx.Response(400, json={"error": {"code": 400, "message": self.error}})
        if request.url.path.endswith("accounts:sendVerificationCode"):
            return httpx.Response(200, json={"sessionInfo": "session-abc"})
        body = json.loads(request.content)
        if body["code"] != "123456":
            return httpx.Response(400, json={"error": {"code": 400, "message": "INVALID_CODE"}})
        return httpx.Response(200, json={"localId": "uid-42", "phoneNumber": "+919876543210"})


@pytest.fixture
def toolkit():
    return FakeIdentityToolkit()


@pytest.fixture
def firebase(toolkit):
    return FirebaseOtpProvider("test-key", transport=httpx.MockTransport(toolkit))


def test_validate_phone_number():
    assert validate_phone_number("+919876543210") is None
    assert validate_phone_number("") == "Phone number is required"
    assert validate_phone_number("9876543210").startswith("Phone number must include country code")
    assert validate_phone_number("+91 98765") == "Phone number must be at least 10 digits"
    assert validate_phone_number("+९१९८७६५४३२१०") == "Phone number must be at least 10 digits"


def test_mock_login():
    user = asyncio.run(MockAuthProvider().login("+919876543210"))
    assert user.uid.startswith("user_")
    assert user.phone_number == "+919876543210"


def test_mock_otp_requires_six_digits():
    provider = MockAuthProvider()
    session = asyncio.run(provider.send_code("+919876543210"))

    with pytest.raises(AuthError):
        asyncio.run(provider.verify_code(session, "12"))
    with pytest.raises(AuthError):
        asyncio.run(provider.verify_code(session, "١٢٣٤٥٦"))
    user = asyncio.run(provider.verify_code(session, "000000"))
    assert user.phone_number == "+919876543210"


def test_firebase_otp_round_trip(firebase, toolkit):
    async def scenario():
        session = await firebase.send_code("+919876543210", recaptcha_token="captcha")
        user = await firebase.verify_code(session, " 123456 ")
        return session, user

    session, user = asyncio.run(scenario())

    assert session.session_info == "session-abc"
    assert user.uid == "uid-42"
    send, verify = toolkit.requests
    assert send.url.params["key"] == "test-key"
    assert json.loads(send.content) == {"phoneNumber": "+919876543210", "recaptchaToken": "captcha"}
    assert json.loads(verify.content) == {"sessionInfo": "session-abc", "code": "123456"}


def test_firebase_wrong_code(firebase):
    async def scenario():
        session = await firebase.send_code("+919876543210")
        await firebase.verify_code(session, "999999")

    with pytest.raises(AuthError) as exc_info:
        asyncio.run(scenario())
    assert exc_info.value.message == "Invalid OTP. Please check the code and try again."


def test_firebase_error_code_with_details(firebase, toolkit):
    toolkit.error = "TOO_MANY_ATTEMPTS_TRY_LATER : Try again later."

    with pytest.raises(AuthError) as exc_info:
        asyncio.run(firebase.send_code("+919876543210"))
    assert exc_info.value.message == "Too many requests. Please try again later."


def test_firebase_rejects_bad_number_locally(firebase, toolkit):
    with pytest.raises(AuthError):
        asyncio.run(firebase.send_code("9876543210"))
    assert toolkit.requests == []


def test_firebase_requires_api_key():
    with pytest.raises(ValueError):
        FirebaseOtpProvider("")


def test_get_auth_provider():
    assert isinstance(get_auth_provider(Settings()), MockAuthProvider)
    provider = get_auth_provider(Settings(auth_mode="firebase", firebase_api_key="k"))
    assert isinstance(provider, FirebaseOtpProvider)


def test_auth_session():
    provider = MockAuthProvider()
    auth = AuthSession()
    assert not auth.is_authenticated

    with pytest.raises(AuthError):
        asyncio.run(auth.verify_code(provider, "123456"))

    asyncio.run(auth.send_code(provider, "+919876543210"))
    asyncio.run(auth.verify_code(provider, "123456"))
    assert auth.is_authenticated
    assert auth.phone_number == "+919876543210"
    assert auth.pending is None

    auth.logout()
    assert not auth.is_authenticated
    assert auth.phone_number is None
