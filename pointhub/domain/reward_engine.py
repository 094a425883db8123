from __future__ import annotations


def total_cost(unit_points: int, quantity: int) -> int:
    return int(unit_points) * int(quantity)


def compute_redemption(
    student_points: int,
    stock: int,
    unit_points: int,
    quantity: int,
) -> tuple[int, int, int]:
    """Return (new_student_points, new_stock, total_cost) after redeeming `quantity` units.

    Pure math: affordability and stock guards are enforced in the service layer,
    so results here may go negative.
    """
    cost = total_cost(unit_points, quantity)
    return int(student_points) - cost, int(stock) - int(quantity), cost


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return (int(total) + page_size - 1) // page_size
