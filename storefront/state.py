"""
Application state

One container owns every shopper session: its cart, login, payment attempt,
saved delivery address and checkout flow. Route handlers receive it through
FastAPI dependency injection instead of module globals.
"""
import logging
from typing import Optional

from storefront.auth_service import AuthProvider, AuthSession, get_auth_provider
from storefront.cart_service import CartStore
from storefront.checkout_flow import CheckoutFlow
from storefront.checkout_storage import CheckoutStorage
from storefront.notification_service import NotificationService
from storefront.order_service import OrderService
from storefront.payment_service import PaymentSession

logger = logging.getLogger(__name__)


class SessionState:
    """Everything one shopper session owns"""

    def __init__(self, session_id: str, order_service: OrderService, notifier: NotificationService):
        self.session_id = session_id
        self.cart = CartStore()
        self.auth = AuthSession()
        self.payment = PaymentSession()
        self.storage = CheckoutStorage(namespace=session_id)
        self.checkout = CheckoutFlow(self.cart, self.storage, order_service, notifier)


class AppState:
    """Session registry plus the shared service clients"""

    def __init__(self, order_service: Optional[OrderService] = None,
                 notifier: Optional[NotificationService] = None,
                 auth_provider: Optional[AuthProvider] = None):
        self.order_service = order_service or OrderService()
        self.notifier = notifier or NotificationService()
        self.auth_provider = auth_provider or get_auth_provider()
        self._sessions: dict[str, SessionState] = {}

    def session(self, session_id: str) -> SessionState:
        """Get a session, creating it on first use"""
        state = self._sessions.get(session_id)
        if state is None:
            state = SessionState(session_id, self.order_service, self.notifier)
            self._sessions[session_id] = state
            logger.debug("[State] new session %s", session_id)
        return state
