"""
draft.py — Checkout Form State Machine

A CheckoutDraft holds everything the user enters on the checkout form:
shipping fields, payment method and the attached payment slip, plus the
submission state:

    EDITING → SUBMITTING → SUCCEEDED
                         → FAILED → EDITING

A failed submission returns to EDITING with every field intact. A draft is
owned by exactly one checkout session and is never shared.
"""

import logging
import threading
import uuid
from typing import Optional

from .errors import (
    DraftClosed,
    ProofFileMissing,
    ProofFileTooLarge,
    ShippingInfoIncomplete,
    SubmissionInProgress,
)
from .models import PaymentMethod, ProofFile, ShippingInfo, SubmissionState

log = logging.getLogger(__name__)

DEFAULT_PROOF_MAX_BYTES = 5 * 1024 * 1024


class CheckoutDraft:
    """
    Mutable checkout form state.

    Attributes:
        shipping (ShippingInfo): Shipping fields as entered so far.
        payment_method (str): Selected payment method tag.
        proof_file (ProofFile | None): The attached payment slip.
        state (SubmissionState): Current submission state.
        idempotency_key (str): Sent with every submission attempt of this draft.
        message (CheckoutError | None): The last user-facing error, if any.
    """

    def __init__(self, max_proof_bytes: int = DEFAULT_PROOF_MAX_BYTES):
        self.max_proof_bytes = max_proof_bytes
        self.shipping = ShippingInfo()
        self.payment_method: str = PaymentMethod.BANK_TRANSFER.value
        self.proof_file: Optional[ProofFile] = None
        self.state = SubmissionState.EDITING
        self.idempotency_key = str(uuid.uuid4())
        self.message = None
        self._lock = threading.Lock()

    # --- Field editing ---
    def update_shipping(self, name: str = None, phone: str = None, address: str = None):
        self._ensure_editable()
        changes = {k: v for k, v in (("name", name), ("phone", phone), ("address", address)) if v is not None}
        self.shipping = self.shipping.model_copy(update=changes)

    def select_payment_method(self, method: str):
        self._ensure_editable()
        self.payment_method = method

    def attach_proof(self, proof: ProofFile):
        """
        Attaches a payment slip.

        Raises:
            ProofFileTooLarge: If the file exceeds the size ceiling. The previously
                attached file, if any, is kept.
        """
        self._ensure_editable()
        if proof.size > self.max_proof_bytes:
            self.message = ProofFileTooLarge(proof.size, self.max_proof_bytes)
            log.info(f"Slip '{proof.filename}' rejected: {proof.size} bytes > {self.max_proof_bytes}.")
            raise self.message
        self.proof_file = proof
        self.message = None

    # --- Guards ---
    def validate(self, requires_shipping: bool):
        """
        Checks submission readiness. The shipping check runs first, so only its
        message is surfaced when both requirements are missing.

        Raises:
            ShippingInfoIncomplete: If shipping applies and a field is blank.
            ProofFileMissing: If no slip is attached.
        """
        if requires_shipping:
            missing = self.shipping.missing_fields()
            if missing:
                raise ShippingInfoIncomplete(missing)
        if self.proof_file is None:
            raise ProofFileMissing()

    def shipping_info_for(self, requires_shipping: bool) -> Optional[ShippingInfo]:
        return self.shipping.model_copy() if requires_shipping else None

    # --- Transitions ---
    def begin_submission(self, requires_shipping: bool, run_guards: bool = True):
        """
        EDITING → SUBMITTING.

        Args:
            requires_shipping (bool): Whether the order needs an address.
            run_guards (bool): False only for the test-mode bypass.

        Raises:
            SubmissionInProgress: If a submission is already in flight.
            DraftClosed: If the draft already produced an order.
            ValidationFailure: If a guard fails; the state stays EDITING.
        """
        with self._lock:
            self._ensure_editable()
            if run_guards:
                try:
                    self.validate(requires_shipping)
                except (ShippingInfoIncomplete, ProofFileMissing) as e:
                    self.message = e
                    raise
            self.state = SubmissionState.SUBMITTING
            self.message = None

    def mark_succeeded(self):
        self._expect(SubmissionState.SUBMITTING)
        self.state = SubmissionState.SUCCEEDED
        # slip bytes are not needed once the order exists
        if self.proof_file is not None:
            self.proof_file = self.proof_file.model_copy(update={"content": b""})

    def mark_failed(self, error):
        """SUBMITTING → FAILED → EDITING; form contents are left as entered."""
        self._expect(SubmissionState.SUBMITTING)
        self.state = SubmissionState.FAILED
        self.message = error
        self.state = SubmissionState.EDITING

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return self.state == SubmissionState.EDITING

    def _ensure_editable(self):
        if self.state == SubmissionState.SUBMITTING:
            raise SubmissionInProgress()
        if self.state == SubmissionState.SUCCEEDED:
            raise DraftClosed()

    def _expect(self, state: SubmissionState):
        if self.state != state:
            raise RuntimeError(f"Invalid draft transition from {self.state.value}, expected {state.value}")

    def to_dict(self) -> dict:
        return {
            "shippingInfo": self.shipping.model_dump(include={"name", "phone", "address"}),
            "paymentMethod": self.payment_method,
            "proofFile": None if self.proof_file is None else {
                "filename": self.proof_file.filename,
                "size": self.proof_file.size,
            },
            "submissionState": self.state.value,
            "canSubmit": self.can_submit,
            "message": None if self.message is None else self.message.to_dict(),
        }
