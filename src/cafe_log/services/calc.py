"""Derived brewing metrics."""


def cups_per_bag(bag_weight_g: float | None, dose_g: float | None) -> float:
    """Return how many doses fit in a bag, or 0 when either side is unknown."""
    if not bag_weight_g or not dose_g:
        return 0
    return bag_weight_g / dose_g


def cost_per_cup(
    purchase_price: float | None,
    bag_weight_g: float | None,
    dose_g: float | None,
) -> float | None:
    """Return the price of one serving rounded to cents.

    Returns None when the price, bag weight or dose is zero or missing.
    """
    if not purchase_price or not bag_weight_g or not dose_g:
        return None
    return round(purchase_price / (bag_weight_g / dose_g), 2)
