"""
workflow.py — Order Submission Workflow

This module contains the orchestration logic that turns a filled-in checkout
draft into a persisted order.

Workflow Overview:
1. Check the draft's guards (shipping fields, payment slip)
2. Build the order-creation payload
3. Send it to the order persistence API (REST)
4. On success clear the cart (cart checkouts only); on failure return the
   draft to editing with all fields intact

A test-mode submission follows the same path but skips the guards, sends
synthetic shipping data and tags the order. It must be enabled in the
settings and explicitly confirmed for every use.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import httpx

from .catalog import resolve_line_items
from .cart import CartRepository
from .clients import OrderApiClient
from .config import CheckoutSettings
from .draft import CheckoutDraft
from .errors import SubmissionFailed, TestModeDisabled, TestModeNotConfirmed
from .models import (
    CheckoutSource,
    CreateOrderRequest,
    DirectPurchase,
    LineItem,
    OrderStatus,
    PaymentMethod,
    ShippingInfo,
    SubmissionState,
)
from .storage import ProofStorage
from .totals import OrderSummary, order_total, summarize

log = logging.getLogger(__name__)

TEST_SHIPPING_INFO = ShippingInfo(name="Test User", phone="0000000000", address="Test Address")


class SubmissionMode(str, Enum):
    NORMAL = "NORMAL"
    TEST = "TEST"


@dataclass
class SubmissionResult:
    """
    Outcome of a successful submission.

    Attributes:
        order_id (str | None): Id assigned by the order API, if it returned one.
        state (SubmissionState): Always SUCCEEDED.
        cart_cleared (bool): True when the checkout came from the cart.
        scroll_to_top (bool): The storefront jumps to the top to show the success view.
    """
    order_id: Optional[str]
    state: SubmissionState
    cart_cleared: bool
    scroll_to_top: bool = True


class CheckoutSession:
    """
    One checkout view: the resolved items, their summary and the draft the
    user edits, together with the collaborators the submission needs.
    """

    def __init__(
            self,
            items: List[LineItem],
            source: CheckoutSource,
            cart: CartRepository,
            client: OrderApiClient,
            storage: ProofStorage,
            settings: CheckoutSettings,
            checkout_id: str = None,
    ):
        self.id = checkout_id or f"chk-{uuid.uuid4().hex[:12]}"
        self.items = items
        self.source = source
        self.cart = cart
        self.client = client
        self.storage = storage
        self.settings = settings
        self.summary: OrderSummary = summarize(items)
        self.draft = CheckoutDraft(max_proof_bytes=settings.proof_max_bytes)
        self.opened_at = time.monotonic()

    @classmethod
    def open(
            cls,
            cart: CartRepository,
            direct: Optional[DirectPurchase],
            client: OrderApiClient,
            storage: ProofStorage,
            settings: CheckoutSettings,
    ) -> "CheckoutSession":
        """
        Resolves the items and starts a fresh draft.

        Raises:
            NoItemsToCheckout: If there is nothing to check out.
        """
        items, source = resolve_line_items(cart.read() if cart is not None else [], direct)
        session = cls(items, source, cart, client, storage, settings)
        log.info(f"[Checkout: {session.id}] Opened from {source.value} with {len(items)} item(s), "
                 f"total ฿{session.summary.total}.")
        return session

    @property
    def requires_shipping(self) -> bool:
        return self.summary.requiresShipping

    def expired(self, now: float = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.opened_at >= self.settings.session_ttl_seconds


def build_payload(session: CheckoutSession, mode: SubmissionMode, user_id: Optional[str]) -> CreateOrderRequest:
    """
    Builds the order-creation payload from the session state.

    Without an authenticated user the configured placeholder id is sent (demo mode).
    """
    draft = session.draft
    test_mode = mode == SubmissionMode.TEST

    if test_mode:
        shipping_info = TEST_SHIPPING_INFO.model_copy() if session.requires_shipping else None
        payment_method = PaymentMethod.TEST_MODE.value
    else:
        shipping_info = draft.shipping_info_for(session.requires_shipping)
        payment_method = draft.payment_method

    return CreateOrderRequest(
        userId=user_id or session.settings.placeholder_user_id,
        items=[item.model_copy() for item in session.items],
        totalAmount=order_total(session.items),
        shippingInfo=shipping_info,
        paymentMethod=payment_method,
        slipUrl=session.storage.store(draft.proof_file, test_mode=test_mode),
        status=OrderStatus.PAID,
        isTestMode=True if test_mode else None,
        idempotencyKey=draft.idempotency_key,
    )


def submit_order(
        session: CheckoutSession,
        mode: SubmissionMode = SubmissionMode.NORMAL,
        user_id: Optional[str] = None,
        confirm: Optional[Callable[[], bool]] = None,
) -> SubmissionResult:
    """
    Submits the session's draft as a new order.

    Args:
        session (CheckoutSession): The checkout to submit.
        mode (SubmissionMode): NORMAL runs all guards; TEST bypasses them.
        user_id (str | None): Authenticated user id, if any.
        confirm (Callable[[], bool] | None): Confirmation prompt, required for TEST mode.

    Returns:
        SubmissionResult: The successful outcome.

    Raises:
        TestModeDisabled: TEST mode requested but not enabled in the settings.
        TestModeNotConfirmed: TEST mode requested without a positive confirmation.
        ValidationFailure: A guard failed; nothing was sent.
        SubmissionInProgress: Another submission of this draft is in flight.
        DraftClosed: The draft already produced an order.
        SubmissionFailed: The order API call failed; the draft is back in EDITING.
    """
    log_prefix = f"[Checkout: {session.id}]"
    draft = session.draft

    if mode == SubmissionMode.TEST:
        if not session.settings.test_mode_enabled:
            log.warning(f"{log_prefix} Test-mode submission refused: disabled by configuration.")
            raise TestModeDisabled()
        if confirm is None or not confirm():
            log.info(f"{log_prefix} Test-mode submission not confirmed.")
            raise TestModeNotConfirmed()

    draft.begin_submission(session.requires_shipping, run_guards=mode == SubmissionMode.NORMAL)
    log.info(f"{log_prefix} Submitting order ({mode.value}), total ฿{session.summary.total}.")

    try:
        payload = build_payload(session, mode, user_id)
        response = session.client.create_order(payload)

    except httpx.HTTPError as e:
        log.error(f"{log_prefix} Submission failed: {e!r}. Draft returned to editing.")
        error = SubmissionFailed()
        draft.mark_failed(error)
        raise error from e

    except Exception as e:
        log.critical(f"{log_prefix} Unexpected error during submission: {e}", exc_info=True)
        error = SubmissionFailed()
        draft.mark_failed(error)
        raise error from e

    draft.mark_succeeded()
    order_id = response.get("orderId") if isinstance(response, dict) else None

    cart_cleared = False
    if session.source == CheckoutSource.CART:
        session.cart.clear()
        cart_cleared = True

    log.info(f"{log_prefix} Order {order_id} created. Cart cleared: {cart_cleared}.")
    return SubmissionResult(order_id=order_id, state=draft.state, cart_cleared=cart_cleared)
