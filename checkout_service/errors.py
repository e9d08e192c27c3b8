"""
errors.py — Exception taxonomy for the checkout flow

Every error carries the user-facing toast text (title + description) shown by
the storefront. Three kinds exist:
    - Validation failures: local and recoverable, the draft is left untouched.
    - Submission failures: the order API call failed, the draft returns to editing.
    - Precondition failures: there is nothing to check out, the caller navigates away.
"""


class CheckoutError(Exception):
    """Base class for all checkout errors."""

    title = "เกิดข้อผิดพลาด"
    description = ""

    def __init__(self, description: str = None):
        if description is not None:
            self.description = description
        super().__init__(self.description or self.title)

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "title": self.title, "description": self.description}


# --- Validation failures ---
class ValidationFailure(CheckoutError):
    """A business rule blocked the requested transition."""


class ShippingInfoIncomplete(ValidationFailure):
    title = "กรุณากรอกข้อมูลให้ครบถ้วน"
    description = "กรุณาระบุชื่อ เบอร์โทร และที่อยู่จัดส่ง"

    def __init__(self, missing_fields=()):
        self.missing_fields = tuple(missing_fields)
        super().__init__()


class ProofFileMissing(ValidationFailure):
    title = "กรุณาแนบสลิปการโอนเงิน"
    description = "เพื่อยืนยันการชำระเงิน"


class ProofFileTooLarge(ValidationFailure):
    title = "ไฟล์มีขนาดใหญ่เกินไป"
    description = "กรุณาอัปโหลดไฟล์ขนาดไม่เกิน 5MB"

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"กรุณาอัปโหลดไฟล์ขนาดไม่เกิน {limit // (1024 * 1024)}MB")


# --- Precondition failure ---
class NoItemsToCheckout(CheckoutError):
    """Neither the cart nor a direct-purchase link yielded any line item."""

    description = "ไม่มีสินค้าในรายการสั่งซื้อ"


# --- Submission failures ---
class SubmissionFailed(CheckoutError):
    """The order API rejected the order or could not be reached."""

    description = "ไม่สามารถทำรายการได้ กรุณาลองใหม่อีกครั้ง"


class SubmissionInProgress(CheckoutError):
    description = "กำลังดำเนินการ กรุณารอสักครู่"


class DraftClosed(CheckoutError):
    """The draft has already produced an order and cannot be submitted again."""

    description = "คำสั่งซื้อนี้ได้รับการยืนยันแล้ว"


# --- Test-mode gating ---
class TestModeDisabled(CheckoutError):
    title = "Test Mode"
    description = "Test mode is disabled for this deployment."


class TestModeNotConfirmed(CheckoutError):
    title = "Test Mode"
    description = "ใช้โหมดทดสอบ (Test Mode) เพื่อข้ามการชำระเงิน? ต้องยืนยันก่อนดำเนินการ"
