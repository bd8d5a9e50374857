"""Order status to tracking-progress mapping.

Pure functions with no external dependencies.
"""

STATUS_STEPS: dict[str, int] = {
    "pending": 1,
    "processing": 2,
    "shipped": 3,
    "completed": 4,
}

STAGE_LABELS: tuple[str, ...] = (
    "Order Received",
    "Processing",
    "Shipped",
    "Delivered",
)


def progress_step(status: str | None) -> int:
    """Return the progress step (0-4) for an order status.

    Unrecognised statuses (including None) map to 0, meaning no stage is active.
    Matching is exact; "Shipped" is not "shipped".
    """
    return STATUS_STEPS.get(status, 0) if status is not None else 0


def progress_stages(status: str | None) -> list[dict]:
    """Return the four display stages with their active flags.

    Stage N is active iff progress_step(status) >= N.
    """
    current = progress_step(status)
    return [
        {"step": step, "label": label, "active": current >= step}
        for step, label in enumerate(STAGE_LABELS, start=1)
    ]
