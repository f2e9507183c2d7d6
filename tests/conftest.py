"""Shared fixtures: catalog items, a valid checkout form and a fake order backend"""
import asyncio
import json

import httpx
import pytest

from storefront.config import Settings
from storefront.data import get_menu_by_id
from storefront.db import close_db, init_db
from storefront.models import CheckoutFormData
from storefront.notification_service import NotificationService
from storefront.order_service import OrderService

API_URL = "http://orders.test/api"
EMAILJS_URL = "https://api.emailjs.test/send"


class FakeBackend:
    """Records requests and answers with a configurable response"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.body: dict = {"success": True, "orderId": "ORD-1001"}
        self.exception = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exception is not None:
            raise self.exception
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def sambar():
    """Spice-customized item, 600 per kg"""
    return get_menu_by_id("sambar-powder")


@pytest.fixture
def mango_pickle():
    """Spice-customized item, 500 per kg"""
    return get_menu_by_id("mango-pickle")


@pytest.fixture
def ragi_malt():
    """Sugar-customized item, 700 per kg"""
    return get_menu_by_id("ragi-malt")


@pytest.fixture
def valid_form():
    return CheckoutFormData(
        full_name="Lakshmi Rao",
        email="lakshmi@example.com",
        phone_number="98765 43210",
        address="12 Temple Street, Basavanagudi",
        landmark="Near Gandhi Bazaar",
        pincode="560004",
        delivery_instructions="Ring the bell twice"
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def mailer():
    return FakeBackend()


@pytest.fixture
def order_service(backend):
    return OrderService(api_url=API_URL, timeout=5.0, transport=httpx.MockTransport(backend))


@pytest.fixture
def email_settings():
    return Settings(
        emailjs_service_id="service_test",
        emailjs_template_id="template_test",
        emailjs_public_key="public_test",
        emailjs_endpoint=EMAILJS_URL
    )


@pytest.fixture
def notifier(mailer, email_settings):
    return NotificationService(settings=email_settings, transport=httpx.MockTransport(mailer))


@pytest.fixture
def run_with_db(tmp_path):
    """Run an async scenario against a fresh local-storage database"""
    def run(scenario):
        async def runner():
            await init_db(tmp_path / "storefront.db")
            try:
                return await scenario()
            finally:
                await close_db()
        return asyncio.run(runner())
    return run
