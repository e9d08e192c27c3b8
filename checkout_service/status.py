"""
status.py — Order Status Presentation

Maps a persisted order's status onto the fixed four-stage progress track
shown on the order detail page. Read-only: status transitions belong to the
order-management backend.
"""

from typing import List, Optional, Union

from pydantic import BaseModel

from .models import Order, OrderStatus

STAGES = (
    (OrderStatus.PENDING, "รอชำระเงิน"),
    (OrderStatus.PAID, "ชำระเงินแล้ว"),
    (OrderStatus.SHIPPING, "กำลังจัดส่ง"),
    (OrderStatus.COMPLETED, "เสร็จสิ้น"),
)

STAGE_INDEX = {status: index for index, (status, _) in enumerate(STAGES)}

STATUS_LABELS = {
    OrderStatus.PENDING: "รอชำระเงิน",
    OrderStatus.PAID: "ชำระแล้ว",
    OrderStatus.SHIPPING: "กำลังจัดส่ง",
    OrderStatus.COMPLETED: "เสร็จสิ้น",
    OrderStatus.CANCELLED: "ยกเลิก",
}


class Stage(BaseModel):
    status: OrderStatus
    label: str
    reached: bool
    current: bool


class OrderProgress(BaseModel):
    orderId: str
    status: OrderStatus
    statusLabel: str
    stageIndex: Optional[int]
    cancelled: bool
    stages: List[Stage]
    trackingNumber: Optional[str] = None
    carrier: Optional[str] = None


def stage_index(status: OrderStatus) -> Optional[int]:
    """PENDING=0 … COMPLETED=3; None for CANCELLED, which sits off the track."""
    return STAGE_INDEX.get(OrderStatus(status))


def status_label(status: Union[OrderStatus, str]) -> str:
    try:
        return STATUS_LABELS[OrderStatus(status)]
    except ValueError:
        return str(status)


def progress(status: OrderStatus) -> List[Stage]:
    current = stage_index(status)
    return [
        Stage(
            status=stage_status,
            label=label,
            reached=current is not None and index <= current,
            current=index == current,
        )
        for index, (stage_status, label) in enumerate(STAGES)
    ]


def tracking_visible(order: Order) -> bool:
    return (
        order.status in (OrderStatus.SHIPPING, OrderStatus.COMPLETED)
        and order.shippingInfo is not None
        and bool(order.shippingInfo.trackingNumber)
    )


def present(order: Order) -> OrderProgress:
    visible = tracking_visible(order)
    return OrderProgress(
        orderId=order.id,
        status=order.status,
        statusLabel=status_label(order.status),
        stageIndex=stage_index(order.status),
        cancelled=order.status == OrderStatus.CANCELLED,
        stages=progress(order.status),
        trackingNumber=order.shippingInfo.trackingNumber if visible else None,
        carrier=order.shippingInfo.carrier if visible else None,
    )
