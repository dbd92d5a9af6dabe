from typing import Literal

IntentKey = Literal[
    "GREETING",
    "FLIRT",
    "CONTENT_REQUEST",
    "CUSTOM_REQUEST",
    "PRICE_ASK",
    "BUY_NOW",
    "SUBSCRIBE",
    "CANCEL",
    "OFF_PLATFORM",
    "SUPPORT",
    "OBJECTION",
    "RUDE_OR_HARASS",
    "UNSAFE_MINOR",
    "OTHER",
]

INTENT_VALUES: tuple[str, ...] = (
    "GREETING",
    "FLIRT",
    "CONTENT_REQUEST",
    "CUSTOM_REQUEST",
    "PRICE_ASK",
    "BUY_NOW",
    "SUBSCRIBE",
    "CANCEL",
    "OFF_PLATFORM",
    "SUPPORT",
    "OBJECTION",
    "RUDE_OR_HARASS",
    "UNSAFE_MINOR",
    "OTHER",
)

HeatLabel = Literal["COLD", "WARM", "HOT"]
HEAT_LABELS: tuple[str, ...] = ("COLD", "WARM", "HOT")

HOT_THRESHOLD = 70
WARM_THRESHOLD = 35

FanState = Literal["new_curious", "new_shy", "cold_fan", "near_expiry", "vip_buyer"]
FAN_STATES: tuple[str, ...] = ("new_curious", "new_shy", "cold_fan", "near_expiry", "vip_buyer")

Objective = Literal[
    "welcome",
    "break_ice",
    "reactivate_cold_fan",
    "renewal",
    "push_monthly",
    "offer_extra",
]

FanTone = Literal["soft", "intimate", "spicy"]

PurchaseKind = Literal["EXTRA", "TIP", "GIFT"]
PURCHASE_KINDS: tuple[str, ...] = ("EXTRA", "TIP", "GIFT")

ChipTone = Literal["info", "neutral", "warning", "danger", "success"]

NextActionSource = Literal["reply", "manual", "suggested", "none"]


def heat_label_for(score: float) -> str:
    if score >= HOT_THRESHOLD:
        return "HOT"
    if score >= WARM_THRESHOLD:
        return "WARM"
    return "COLD"
