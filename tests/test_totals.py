from checkout_service.models import ProductKind
from checkout_service.totals import order_total, shipping_line, summarize

from conftest import mk_item


def test_total_is_sum_of_line_totals():
    items = [mk_item(id="a", price=350, quantity=2), mk_item(id="b", price=120, quantity=1)]
    assert order_total(items) == 820


def test_quantity_change_moves_total_by_exact_amount():
    one = order_total([mk_item(price=100, quantity=1)])
    three = order_total([mk_item(price=100, quantity=3)])
    assert three - one == 200


def test_total_rounds_to_whole_baht():
    assert order_total([mk_item(price=99.5)]) == 100
    assert order_total([mk_item(price=0.1, quantity=3)]) == 0


def test_shipping_line_labels():
    assert shipping_line(True) == "ฟรี"
    assert shipping_line(False) == "-"


def test_course_only_summary():
    summary = summarize([mk_item("คอร์สกฎหมายแพ่ง", kind=ProductKind.COURSE, price=1500)])

    assert summary.requiresShipping is False
    assert summary.total == 1500
    assert summary.shippingCost == 0
    assert summary.shippingLabel == "-"


def test_book_summary():
    summary = summarize([mk_item("หนังสือกฎหมายอาญา", kind=ProductKind.BOOK, price=350, quantity=2)])

    assert summary.requiresShipping is True
    assert summary.total == 700
    assert summary.shippingLabel == "ฟรี"
    assert summary.itemCount == 2
    assert summary.lines[0].lineTotal == 700
    assert summary.lines[0].unitLabel == "เล่ม"
