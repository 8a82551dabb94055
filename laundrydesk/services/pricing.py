# laundrydesk/services/pricing.py
from ..model import Setting
from ..utils.money import D, Money, parse_money, round_money

DELIVERY_TYPES = ("standard", "same_day", "next_day")

# setting key -> default multiplier
EXPRESS_SETTINGS = {
    "same_day": ("express_same_day_multiplier", "2"),
    "next_day": ("express_next_day_multiplier", "3"),
}

def parse_multiplier(value, source="express_surcharge_multiplier") -> Money:
    m = parse_money(value)
    if m is None or m <= 0:
        raise ValueError(f"{source} must be a number greater than 0")
    return m

def express_multiplier_for(delivery_type: str, requested=None) -> Money:
    """Multiplier for an express tier: explicit request wins, then settings, then defaults."""
    if delivery_type not in DELIVERY_TYPES:
        raise ValueError(f"delivery_type must be one of {', '.join(DELIVERY_TYPES)}")
    if requested not in (None, "", 0, "0"):
        return parse_multiplier(requested)
    if delivery_type == "standard":
        return D(0)
    key, default = EXPRESS_SETTINGS[delivery_type]
    return parse_multiplier(Setting.get_value(key, default), source=f"setting {key}")

def calculate_total(service, quantity=1, weight=0, delivery_type="standard", express_multiplier=0) -> Money:
    """
    base_price and price_per_item are per piece; price_per_kg applies to weight.
    Non-standard delivery multiplies the whole line by the express multiplier.
    """
    qty = D(quantity or 1)
    weight = D(weight or 0)
    total = D(service.base_price) * qty

    if D(service.price_per_item) > 0:
        total += D(service.price_per_item) * qty
    if D(service.price_per_kg) > 0 and weight > 0:
        total += D(service.price_per_kg) * weight

    multiplier = D(express_multiplier)
    if delivery_type != "standard" and multiplier > 0:
        total = total * multiplier
    return round_money(total)
