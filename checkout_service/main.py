"""
main.py — FastAPI Entry Point for the Checkout Service

This module provides the REST API used by the storefront's checkout page.

Responsibilities:
    • Keep per-user carts (the cart collaborator)
    • Open checkout sessions from the cart or a "buy now" link
    • Accept shipping details and the payment slip
    • Submit orders to the order persistence API
    • Present order progress for the order detail page
    • Provide system health information
"""

import threading
import time
from typing import Dict, Optional

import httpx
from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ValidationError

from .cart import CartStore
from .clients import OrderApiClient
from .config import EMPTY_CHECKOUT_REDIRECT, CheckoutSettings
from .errors import (
    CheckoutError,
    DraftClosed,
    NoItemsToCheckout,
    ProofFileTooLarge,
    SubmissionFailed,
    SubmissionInProgress,
    TestModeDisabled,
    TestModeNotConfirmed,
    ValidationFailure,
)
from .logging_config import get_logger, setup_logging
from .models import CartEntry, DirectPurchase, ProofFile, SubmissionState
from .status import present, status_label
from .storage import PlaceholderProofStorage
from .workflow import CheckoutSession, SubmissionMode, submit_order

# Initialization
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Checkout Service")

settings = CheckoutSettings.from_env()
cart_store = CartStore()
_sessions: Dict[str, CheckoutSession] = {}
_sessions_lock = threading.Lock()
_order_client: Optional[OrderApiClient] = None
_order_client_lock = threading.Lock()

UPLOAD_CHUNK_BYTES = 64 * 1024


# --- Dependencies ---
def get_settings() -> CheckoutSettings:
    return settings


def get_cart_store() -> CartStore:
    return cart_store


def get_order_client() -> OrderApiClient:
    global _order_client
    with _order_client_lock:
        if _order_client is None:
            _order_client = OrderApiClient(settings.order_api_url)
        return _order_client


@app.on_event("shutdown")
def on_shutdown():
    if _order_client is not None:
        _order_client.close()


# --- Request bodies ---
class QuantityUpdate(BaseModel):
    quantity: int


class OpenCheckoutRequest(BaseModel):
    userId: Optional[str] = None
    direct: Optional[DirectPurchase] = None


class ShippingUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SubmitRequest(BaseModel):
    mode: SubmissionMode = SubmissionMode.NORMAL
    confirmed: bool = False
    userId: Optional[str] = None


def _status_code_for(error: CheckoutError) -> int:
    if isinstance(error, ProofFileTooLarge):
        return 413
    if isinstance(error, ValidationFailure):
        return 422
    if isinstance(error, (SubmissionInProgress, DraftClosed)):
        return 409
    if isinstance(error, (TestModeDisabled, TestModeNotConfirmed)):
        return 403
    if isinstance(error, SubmissionFailed):
        return 502
    return 400


def _http_error(error: CheckoutError) -> HTTPException:
    return HTTPException(status_code=_status_code_for(error), detail=error.to_dict())


def _register_session(session: CheckoutSession):
    """Stores a new session and discards the ones left unfinished past their lifetime."""
    now = time.monotonic()
    with _sessions_lock:
        for stale_id in [key for key, existing in _sessions.items() if existing.expired(now)]:
            log.info(f"[Checkout: {stale_id}] Discarded after expiry.")
            del _sessions[stale_id]
        _sessions[session.id] = session


def _drop_session(checkout_id: str):
    with _sessions_lock:
        _sessions.pop(checkout_id, None)


async def _read_upload(file: UploadFile, limit: int) -> bytes:
    """Reads at most limit + 1 bytes, enough to tell an oversized file apart."""
    content = bytearray()
    while len(content) <= limit:
        chunk = await file.read(min(UPLOAD_CHUNK_BYTES, limit + 1 - len(content)))
        if not chunk:
            break
        content.extend(chunk)
    return bytes(content)


def _get_session(checkout_id: str) -> CheckoutSession:
    with _sessions_lock:
        session = _sessions.get(checkout_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Checkout not found.")
    return session


def _session_view(session: CheckoutSession) -> dict:
    return {
        "checkoutId": session.id,
        "source": session.source.value,
        "summary": session.summary.model_dump(),
        "draft": session.draft.to_dict(),
        "testModeAvailable": session.settings.test_mode_enabled,
    }


def _cart_view(user_id: str, store: CartStore) -> dict:
    cart = store.for_user(user_id)
    return {
        "userId": user_id,
        "items": [entry.model_dump() for entry in cart.read()],
        "totalItems": cart.total_items,
    }


# --- Cart ---
@app.get("/v1/carts/{user_id}")
def get_cart(user_id: str, store: CartStore = Depends(get_cart_store)):
    """Returns the user's cart; an unknown user gets an empty one."""
    return _cart_view(user_id, store)


@app.post("/v1/carts/{user_id}/items", status_code=201)
def add_cart_item(user_id: str, entry: CartEntry, store: CartStore = Depends(get_cart_store)):
    """Adds an entry, merging quantities with an existing entry of the same product."""
    store.for_user(user_id).add_item(entry)
    log.info(f"[Cart: {user_id}] Added '{entry.title}' x{entry.quantity}.")
    return _cart_view(user_id, store)


@app.patch("/v1/carts/{user_id}/items/{product_id}")
def update_cart_item(user_id: str, product_id: str, update: QuantityUpdate,
                     store: CartStore = Depends(get_cart_store)):
    """Sets an entry's quantity; zero or less removes it."""
    store.for_user(user_id).update_quantity(product_id, update.quantity)
    return _cart_view(user_id, store)


@app.delete("/v1/carts/{user_id}/items/{product_id}")
def remove_cart_item(user_id: str, product_id: str, store: CartStore = Depends(get_cart_store)):
    """Removes an entry. Removing a product not in the cart is a no-op."""
    store.for_user(user_id).remove_item(product_id)
    return _cart_view(user_id, store)


# --- Checkout ---
@app.post("/v1/checkouts", status_code=201)
def open_checkout(
        request: OpenCheckoutRequest,
        store: CartStore = Depends(get_cart_store),
        client: OrderApiClient = Depends(get_order_client),
        current_settings: CheckoutSettings = Depends(get_settings),
):
    """
    Opens a checkout session.

    A direct-purchase link overrides the cart. When neither yields items the
    caller is redirected to the book catalog instead of seeing an empty checkout.

    Returns:
        dict: checkoutId, source, order summary and the empty draft.
    """
    user_id = request.userId or current_settings.placeholder_user_id
    storage = PlaceholderProofStorage(current_settings.placeholder_slip_url,
                                      current_settings.placeholder_test_slip_url)
    try:
        session = CheckoutSession.open(store.for_user(user_id), request.direct, client, storage, current_settings)
    except NoItemsToCheckout:
        log.info(f"[User: {user_id}] Nothing to check out, redirecting to {EMPTY_CHECKOUT_REDIRECT}.")
        return RedirectResponse(EMPTY_CHECKOUT_REDIRECT, status_code=303)

    _register_session(session)
    return _session_view(session)


@app.get("/v1/checkouts/{checkout_id}")
def get_checkout(checkout_id: str):
    return _session_view(_get_session(checkout_id))


@app.put("/v1/checkouts/{checkout_id}/shipping")
def update_shipping(checkout_id: str, update: ShippingUpdate):
    session = _get_session(checkout_id)
    try:
        session.draft.update_shipping(**update.model_dump())
    except CheckoutError as e:
        raise _http_error(e)
    return _session_view(session)


@app.post("/v1/checkouts/{checkout_id}/proof")
async def attach_proof(checkout_id: str, file: UploadFile = File(...)):
    """
    Attaches the payment slip. Files above the size ceiling are rejected with
    413 and any previously attached slip stays in place.
    """
    session = _get_session(checkout_id)
    content = await _read_upload(file, session.draft.max_proof_bytes)
    # an oversized upload reports its true size when the server knows it
    size = max(len(content), file.size or 0) if len(content) > session.draft.max_proof_bytes else len(content)
    proof = ProofFile(filename=file.filename or "slip", size=size,
                      contentType=file.content_type, content=content)
    try:
        session.draft.attach_proof(proof)
    except CheckoutError as e:
        raise _http_error(e)
    return _session_view(session)


@app.post("/v1/checkouts/{checkout_id}/submit", status_code=201)
def submit_checkout(checkout_id: str, request: SubmitRequest):
    """
    Submits the checkout as a new order.

    Status codes:
        201: Order created.
        403: Test mode disabled or not confirmed.
        409: A submission is already in flight or the order was already placed.
        413/422: A guard failed; nothing was sent.
        502: The order API failed; the form is back in editing with its contents.

    A successful checkout is closed; its id no longer resolves afterwards.
    """
    session = _get_session(checkout_id)
    try:
        result = submit_order(
            session,
            mode=request.mode,
            user_id=request.userId,
            confirm=lambda: request.confirmed,
        )
    except CheckoutError as e:
        raise _http_error(e)

    if result.state == SubmissionState.SUCCEEDED:
        _drop_session(session.id)

    return {
        "checkoutId": session.id,
        "orderId": result.order_id,
        "submissionState": result.state.value,
        "cartCleared": result.cart_cleared,
        "scrollToTop": result.scroll_to_top,
    }


# --- Orders ---
@app.get("/v1/users/{user_id}/orders")
def list_user_orders(user_id: str, client: OrderApiClient = Depends(get_order_client)):
    try:
        orders = client.list_orders(user_id)
    except httpx.HTTPError as e:
        log.error(f"[User: {user_id}] Order history unavailable: {e!r}")
        raise HTTPException(status_code=502, detail="Order service unavailable.")
    except ValidationError as e:
        log.error(f"[User: {user_id}] Order service returned malformed orders: {e}")
        raise HTTPException(status_code=502, detail="Order service returned an invalid response.")
    return [
        {
            "orderId": order.id,
            "status": order.status.value,
            "statusLabel": status_label(order.status),
            "totalAmount": order.totalAmount,
            "createdAt": order.createdAt,
        }
        for order in orders
    ]


@app.get("/v1/orders/{order_id}/progress")
def order_progress(order_id: str, client: OrderApiClient = Depends(get_order_client)):
    try:
        order = client.get_order(order_id)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            raise HTTPException(status_code=404, detail="Order not found.")
        raise HTTPException(status_code=502, detail="Order service unavailable.")
    except httpx.TransportError:
        raise HTTPException(status_code=502, detail="Order service unavailable.")
    except ValidationError as e:
        log.error(f"[Order: {order_id}] Order service returned a malformed order: {e}")
        raise HTTPException(status_code=502, detail="Order service returned an invalid response.")
    return present(order).model_dump()


# Health Check Endpoint
@app.get("/health")
def health_check():
    return {"status": "ok"}
