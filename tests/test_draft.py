import pytest

from checkout_service import errors
from checkout_service.draft import CheckoutDraft
from checkout_service.models import PaymentMethod, ProofFile, SubmissionState

from conftest import MiB, mk_proof


def filled_draft() -> CheckoutDraft:
    draft = CheckoutDraft()
    draft.update_shipping(name="สมชาย", phone="0812345678", address="123 ถ.สุขุมวิท")
    draft.attach_proof(mk_proof())
    return draft


def test_new_draft_is_editing_with_bank_transfer():
    draft = CheckoutDraft()

    assert draft.state == SubmissionState.EDITING
    assert draft.payment_method == PaymentMethod.BANK_TRANSFER.value
    assert draft.proof_file is None
    assert draft.can_submit


def test_update_shipping_is_partial():
    draft = CheckoutDraft()
    draft.update_shipping(name="A")
    draft.update_shipping(phone="B")

    assert (draft.shipping.name, draft.shipping.phone, draft.shipping.address) == ("A", "B", "")


def test_oversized_proof_rejected_and_previous_kept():
    draft = CheckoutDraft()
    first = mk_proof(size=MiB, filename="first.png")
    draft.attach_proof(first)

    with pytest.raises(errors.ProofFileTooLarge):
        draft.attach_proof(mk_proof(size=6 * MiB, filename="huge.png"))

    assert draft.proof_file == first


def test_proof_at_exact_limit_accepted():
    draft = CheckoutDraft()
    draft.attach_proof(mk_proof(size=5 * MiB))
    assert draft.proof_file is not None


def test_missing_address_blocks_submission():
    draft = filled_draft()
    draft.update_shipping(address="")

    with pytest.raises(errors.ShippingInfoIncomplete) as exc:
        draft.begin_submission(requires_shipping=True)

    assert exc.value.missing_fields == ("address",)
    assert draft.state == SubmissionState.EDITING


def test_whitespace_only_counts_as_empty():
    draft = filled_draft()
    draft.update_shipping(name="   ")

    with pytest.raises(errors.ShippingInfoIncomplete):
        draft.validate(requires_shipping=True)


def test_shipping_checked_before_proof():
    draft = CheckoutDraft()

    with pytest.raises(errors.ShippingInfoIncomplete):
        draft.begin_submission(requires_shipping=True)
    assert isinstance(draft.message, errors.ShippingInfoIncomplete)


def test_missing_proof_blocks_submission():
    draft = CheckoutDraft()

    with pytest.raises(errors.ProofFileMissing):
        draft.begin_submission(requires_shipping=False)
    assert draft.state == SubmissionState.EDITING


def test_digital_order_ignores_blank_shipping():
    draft = CheckoutDraft()
    draft.attach_proof(mk_proof())

    draft.begin_submission(requires_shipping=False)

    assert draft.state == SubmissionState.SUBMITTING
    assert draft.shipping_info_for(False) is None


def test_second_submission_while_submitting_rejected():
    draft = filled_draft()
    draft.begin_submission(requires_shipping=True)

    assert not draft.can_submit
    with pytest.raises(errors.SubmissionInProgress):
        draft.begin_submission(requires_shipping=True)
    with pytest.raises(errors.SubmissionInProgress):
        draft.update_shipping(name="other")


def test_failure_returns_to_editing_with_fields_intact():
    draft = filled_draft()
    shipping_before = draft.shipping.model_copy()
    proof_before = draft.proof_file
    draft.begin_submission(requires_shipping=True)

    draft.mark_failed(errors.SubmissionFailed())

    assert draft.state == SubmissionState.EDITING
    assert draft.shipping == shipping_before
    assert draft.proof_file is proof_before
    assert isinstance(draft.message, errors.SubmissionFailed)


def test_succeeded_draft_is_closed():
    draft = filled_draft()
    draft.begin_submission(requires_shipping=True)
    draft.mark_succeeded()

    assert draft.state == SubmissionState.SUCCEEDED
    with pytest.raises(errors.DraftClosed):
        draft.begin_submission(requires_shipping=True)


def test_succeeded_draft_releases_slip_content():
    draft = CheckoutDraft()
    draft.attach_proof(ProofFile(filename="slip.png", size=3, contentType="image/png", content=b"png"))
    draft.begin_submission(requires_shipping=False)
    draft.mark_succeeded()

    assert draft.proof_file.content == b""
    assert (draft.proof_file.filename, draft.proof_file.size) == ("slip.png", 3)


def test_failed_draft_keeps_slip_content():
    draft = CheckoutDraft()
    draft.attach_proof(ProofFile(filename="slip.png", size=3, content=b"png"))
    draft.begin_submission(requires_shipping=False)
    draft.mark_failed(errors.SubmissionFailed())

    assert draft.proof_file.content == b"png"


def test_guards_can_be_skipped():
    draft = CheckoutDraft()
    draft.begin_submission(requires_shipping=True, run_guards=False)
    assert draft.state == SubmissionState.SUBMITTING


def test_to_dict():
    view = filled_draft().to_dict()

    assert view["submissionState"] == "EDITING"
    assert view["proofFile"] == {"filename": "slip.png", "size": 1024}
    assert view["shippingInfo"]["name"] == "สมชาย"
