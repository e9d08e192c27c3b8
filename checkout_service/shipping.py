"""
shipping.py — Shipping Eligibility Classifier

Decides whether an order needs a physical shipping address. Product metadata
upstream is populated inconsistently, so each item runs through an ordered
chain of classification rules:

    explicit digital flag → product type → title keywords → physical (default)

The first rule that has an opinion wins. The default is physical: asking for
an address on a digital good is a smaller failure than never collecting one
for a printed book.
"""

from typing import Callable, Iterable, Optional, Tuple

from .models import LineItem, ProductKind

# "Exam" and "ข้อสอบ" are intentionally absent: printed compilations such as
# "รวมข้อสอบ" are physical books.
DIGITAL_TITLE_KEYWORDS: Tuple[str, ...] = ("คอร์ส", "Course", "E-Book", "ebook")

DIGITAL_KINDS = frozenset({ProductKind.COURSE, ProductKind.EXAM})

# A rule returns True (digital), False (physical) or None (no opinion).
ClassificationRule = Callable[[LineItem], Optional[bool]]


def by_digital_flag(item: LineItem) -> Optional[bool]:
    return item.isDigitalFlag


def by_kind(item: LineItem) -> Optional[bool]:
    if item.kind in DIGITAL_KINDS:
        return True
    return None


def by_title_keyword(item: LineItem, keywords: Iterable[str] = DIGITAL_TITLE_KEYWORDS) -> Optional[bool]:
    title = (item.title or "").casefold()
    if any(keyword.casefold() in title for keyword in keywords):
        return True
    return None


def physical_by_default(item: LineItem) -> Optional[bool]:
    return False


CLASSIFICATION_CHAIN: Tuple[ClassificationRule, ...] = (
    by_digital_flag,
    by_kind,
    by_title_keyword,
    physical_by_default,
)


def is_digital(item: LineItem, chain: Iterable[ClassificationRule] = CLASSIFICATION_CHAIN) -> bool:
    """
    Classifies a single line item.

    Args:
        item (LineItem): The item to classify.
        chain (Iterable[ClassificationRule]): Rules evaluated in order; the first non-None verdict wins.

    Returns:
        bool: True if the item is digital, False if it needs physical delivery.
    """
    for rule in chain:
        verdict = rule(item)
        if verdict is not None:
            return verdict
    return False


def requires_shipping(items: Iterable[LineItem], chain: Iterable[ClassificationRule] = CLASSIFICATION_CHAIN) -> bool:
    """True if any item of the order is physical."""
    chain = tuple(chain)
    return any(not is_digital(item, chain) for item in items)


def unit_label(item: LineItem) -> str:
    """Quantity unit shown next to an item: "รายการ" for courses and e-learning titles, "เล่ม" for books."""
    if item.kind == ProductKind.COURSE or by_title_keyword(item):
        return "รายการ"
    return "เล่ม"
