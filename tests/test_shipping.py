from checkout_service.models import ProductKind
from checkout_service.shipping import (
    DIGITAL_TITLE_KEYWORDS,
    by_title_keyword,
    is_digital,
    requires_shipping,
    unit_label,
)

from conftest import mk_item


def test_all_flagged_digital_needs_no_shipping():
    items = [
        mk_item("หนังสือ A", id="a", kind=ProductKind.BOOK, digital=True),
        mk_item("หนังสือ B", id="b", digital=True),
    ]
    assert requires_shipping(items) is False


def test_one_plain_book_needs_shipping():
    items = [
        mk_item("คอร์สกฎหมายแพ่ง", id="c", kind=ProductKind.COURSE),
        mk_item("หนังสือกฎหมายอาญา", id="b", kind=ProductKind.BOOK),
    ]
    assert requires_shipping(items) is True


def test_explicit_flag_beats_kind_and_title():
    assert is_digital(mk_item("Course Handbook", kind=ProductKind.COURSE, digital=False)) is False
    assert is_digital(mk_item("หนังสือ", kind=ProductKind.BOOK, digital=True)) is True


def test_course_and_exam_kinds_are_digital():
    assert is_digital(mk_item("อะไรก็ได้", kind=ProductKind.COURSE)) is True
    assert is_digital(mk_item("อะไรก็ได้", kind=ProductKind.EXAM)) is True


def test_keyword_match_is_case_insensitive():
    upper = mk_item("ติว COURSE พิเศษ", kind=ProductKind.BOOK)
    lower = mk_item("ติว course พิเศษ", kind=ProductKind.BOOK)

    assert is_digital(upper) is True
    assert is_digital(upper) == is_digital(lower)


def test_each_keyword_classifies_digital():
    for keyword in DIGITAL_TITLE_KEYWORDS:
        assert by_title_keyword(mk_item(f"ชุด {keyword} ใหม่")) is True
    assert is_digital(mk_item("กฎหมาย e-book", kind=ProductKind.BOOK)) is True


def test_exam_compilation_book_is_physical():
    item = mk_item("รวมข้อสอบเนติบัณฑิต", kind=ProductKind.BOOK)

    assert is_digital(item) is False
    assert requires_shipping([item]) is True
    assert by_title_keyword(mk_item("Exam Collection")) is None


def test_untyped_item_defaults_to_physical():
    assert is_digital(mk_item("หนังสือ", kind=None)) is False


def test_custom_chain():
    always_digital = (lambda item: True,)
    assert requires_shipping([mk_item()], chain=always_digital) is False


def test_unit_label():
    assert unit_label(mk_item("คอร์สสรุป", kind=ProductKind.BOOK)) == "รายการ"
    assert unit_label(mk_item("x", kind=ProductKind.COURSE)) == "รายการ"
    assert unit_label(mk_item("หนังสือ", kind=ProductKind.BOOK)) == "เล่ม"
