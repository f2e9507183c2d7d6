"""FastAPI main application"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.checkout_flow import CheckoutState
from storefront.checkout_storage import delivery_address_to_form_data
from storefront.config import get_settings
from storefront.data import (
    MENU_ITEMS, get_all_categories, get_menu_by_category, get_menu_by_id
)
from storefront.db import close_db, init_db
from storefront.errors import StorefrontError
from storefront.models import (
    AddToCartRequest, CheckoutRequest, LoginRequest, LogoutRequest,
    PaymentCompleteRequest, PaymentOptionsRequest, SendOtpRequest,
    UpdateCartItemRequest, VerifyOtpRequest
)
from storefront.payment_service import build_payment_options
from storefront.state import AppState

logger = logging.getLogger(__name__)

CHECKOUT_STATUS_CODES = {
    "validation": 422,
    "empty_cart": 400,
    "remote_order": 502,
    "total_mismatch": 409,
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )


def create_app(app_state: Optional[AppState] = None, db_path: Optional[Path] = None) -> FastAPI:
    """Build the application; tests pass their own state and database"""

    # ============ Application lifespan ============

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_logging(settings.log_level)
        logger.info("[Startup] opening local storage")
        await init_db(db_path)
        app.state.storefront = app_state or AppState()
        logger.info("[Startup] order backend: %s", app.state.storefront.order_service.api_url)

        yield

        logger.info("[Shutdown] closing local storage")
        await close_db()

    app = FastAPI(
        title="Homemade Foods Storefront",
        description="Catalog, cart and checkout for a homemade-foods shop",
        version="1.0.0",
        lifespan=lifespan
    )

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        body = {"status": "error", "kind": exc.kind, "message": exc.message}
        errors = getattr(exc, "errors", None)
        if errors:
            body["errors"] = errors
        return JSONResponse(status_code=exc.status_code, content=body)

    def get_state(request: Request) -> AppState:
        return request.app.state.storefront

    # ============ Health check ============

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "storefront", "version": "1.0.0"}

    # ============ Catalog API ============

    @app.get("/api/menu")
    async def get_menu():
        """Full catalog"""
        return {
            "items": [item.model_dump() for item in MENU_ITEMS],
            "categories": get_all_categories()
        }

    @app.get("/api/menu/category/{category_id}")
    async def get_menu_category(category_id: str):
        items = get_menu_by_category(category_id)
        if not items:
            return JSONResponse(status_code=404, content={"error": "Category not found", "items": []})
        return {"items": [item.model_dump() for item in items]}

    @app.get("/api/menu/item/{item_id}")
    async def get_menu_item(item_id: str):
        item = get_menu_by_id(item_id)
        if not item:
            return JSONResponse(status_code=404, content={"error": "Item not found"})
        return item.model_dump()

    # ============ Cart API ============

    @app.get("/api/cart/{session_id}")
    async def get_cart(session_id: str, state: AppState = Depends(get_state)):
        return state.session(session_id).cart.snapshot(session_id).model_dump()

    @app.get("/api/cart/{session_id}/pricing")
    async def get_cart_pricing(session_id: str, state: AppState = Depends(get_state)):
        """Order summary pricing"""
        return state.session(session_id).cart.calculate_pricing().model_dump()

    @app.post("/api/cart/add")
    async def add_to_cart(request: AddToCartRequest, state: AppState = Depends(get_state)):
        item = get_menu_by_id(request.item_id)
        if not item:
            return JSONResponse(status_code=404, content={"status": "error", "message": "Item not found"})

        cart = state.session(request.session_id).cart
        try:
            line = cart.add_to_cart(item, request.quantity, request.sugar_option, request.spice_level)
        except ValueError as e:
            return JSONResponse(status_code=400, content={"status": "error", "message": str(e)})

        return {
            "status": "added",
            "cart_item_id": line.cart_item_id,
            "cart": cart.snapshot(request.session_id).model_dump(),
            "message": f"Added {item.name} x{request.quantity}"
        }

    @app.put("/api/cart/item/{session_id}/{cart_item_id}")
    async def update_cart_item(session_id: str, cart_item_id: str, request: UpdateCartItemRequest,
                               state: AppState = Depends(get_state)):
        cart = state.session(session_id).cart
        cart.update_quantity(cart_item_id, request.quantity)
        return {"status": "updated", "cart": cart.snapshot(session_id).model_dump()}

    @app.delete("/api/cart/item/{session_id}/{cart_item_id}")
    async def remove_cart_item(session_id: str, cart_item_id: str, state: AppState = Depends(get_state)):
        cart = state.session(session_id).cart
        cart.remove_from_cart(cart_item_id)
        return {"status": "removed", "cart": cart.snapshot(session_id).model_dump()}

    @app.delete("/api/cart/{session_id}")
    async def clear_cart(session_id: str, state: AppState = Depends(get_state)):
        cart = state.session(session_id).cart
        cart.clear_cart()
        return {"status": "cleared", "cart": cart.snapshot(session_id).model_dump()}

    # ============ Checkout API ============

    @app.get("/api/checkout/{session_id}/saved-address")
    async def get_saved_address(session_id: str, state: AppState = Depends(get_state)):
        """Prefill data for the checkout form"""
        address = await state.session(session_id).storage.get_checkout_data()
        if address is None:
            return {"status": "empty", "form": None}
        return {"status": "success", "form": delivery_address_to_form_data(address).model_dump()}

    @app.post("/api/checkout")
    async def checkout(request: CheckoutRequest, state: AppState = Depends(get_state)):
        """Validate, confirm and place the order"""
        session = state.session(request.session_id)
        if session.checkout.is_busy:
            return JSONResponse(
                status_code=409,
                content={"status": "error", "message": "Your order is already being placed."}
            )

        result = await session.checkout.submit(request.form, lambda: request.confirmed)
        body = result.model_dump(mode="json")
        if result.state == CheckoutState.FAILED:
            return JSONResponse(status_code=CHECKOUT_STATUS_CODES.get(result.error_kind, 400), content=body)
        return body

    # ============ Order API ============

    @app.get("/api/orders")
    async def list_orders(state: AppState = Depends(get_state)):
        """Admin order listing"""
        orders = await state.order_service.list_orders()
        return {
            "status": "success",
            "order_count": len(orders),
            "orders": [order.model_dump(mode="json", by_alias=True) for order in orders]
        }

    @app.get("/api/orders/{order_id}")
    async def get_order(order_id: str, state: AppState = Depends(get_state)):
        order = await state.order_service.get_order(order_id)
        return {"status": "success", "order": order.model_dump(mode="json", by_alias=True)}

    # ============ Auth API ============

    @app.post("/api/auth/login")
    async def login(request: LoginRequest, state: AppState = Depends(get_state)):
        """Direct login (mock provider)"""
        user = await state.session(request.session_id).auth.login(state.auth_provider, request.phone_number)
        return {"status": "success", "user": user.model_dump()}

    @app.post("/api/auth/otp/send")
    async def send_otp(request: SendOtpRequest, state: AppState = Depends(get_state)):
        auth = state.session(request.session_id).auth
        await auth.send_code(state.auth_provider, request.phone_number, request.recaptcha_token)
        return {"status": "sent", "phone_number": request.phone_number}

    @app.post("/api/auth/otp/verify")
    async def verify_otp(request: VerifyOtpRequest, state: AppState = Depends(get_state)):
        user = await state.session(request.session_id).auth.verify_code(state.auth_provider, request.code)
        return {"status": "success", "user": user.model_dump()}

    @app.post("/api/auth/logout")
    async def logout(request: LogoutRequest, state: AppState = Depends(get_state)):
        state.session(request.session_id).auth.logout()
        return {"status": "logged_out"}

    @app.get("/api/auth/{session_id}")
    async def auth_status(session_id: str, state: AppState = Depends(get_state)):
        auth = state.session(session_id).auth
        return {"is_authenticated": auth.is_authenticated, "phone_number": auth.phone_number}

    # ============ Payment API ============

    @app.post("/api/payments/options")
    async def payment_options(request: PaymentOptionsRequest, state: AppState = Depends(get_state)):
        """Razorpay Checkout options for the current cart"""
        session = state.session(request.session_id)
        options = build_payment_options(session.cart.get_total_price(), request.form)
        return session.payment.open(options).model_dump()

    @app.post("/api/payments/complete")
    async def payment_complete(request: PaymentCompleteRequest, state: AppState = Depends(get_state)):
        payment = state.session(request.session_id).payment
        if request.dismissed:
            outcome = payment.handle_dismiss()
        else:
            outcome = payment.handle_success(request.razorpay_payment_id or "")
        return {"status": "dismissed" if outcome.dismissed else "paid", "payment_id": outcome.payment_id}

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=port, reload=True)
