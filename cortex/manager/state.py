import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from cortex.schemas.fan import FanSnapshot, Message
from cortex.schemas.results import FanStateAnalysis, FanStateContext, StateChip
from cortex.utils.locale import normalize_locale_base
from cortex.utils.timestamps import ensure_utc, round_half_up

log = logging.getLogger("cortex-fan-state")

NEAR_EXPIRY_DAYS = 3
COLD_DAYS_THRESHOLD = 10
VIP_EXTRAS_COUNT_THRESHOLD = 2
VIP_SPENT_THRESHOLD = 60
VIP_LTV_THRESHOLD = 120
MONTHLY_PUSH_EXTRAS_COUNT = 3
MONTHLY_PUSH_SPEND = 120

EXPIRY_SOON_TAGS = ("trial_soon", "monthly_soon")

OBJECTIVES = {
    "new_curious": "welcome",
    "new_shy": "break_ice",
    "cold_fan": "reactivate_cold_fan",
    "near_expiry": "renewal",
    "vip_buyer": "offer_extra",
}

DEFAULT_TONES = {
    "new_shy": "soft",
    "new_curious": "intimate",
    "cold_fan": "intimate",
    "near_expiry": "intimate",
    "vip_buyer": "spicy",
}

COPY = {
    "es": {
        "new_curious": "Fan nuevo, ya ha interactuado. Aún está entendiendo qué puede recibir aquí.",
        "new_shy": "Fan nuevo y tímido; casi no ha hablado todavía.",
        "expires_today": "Tu suscripción caduca hoy. Si no actúas, pierdes un fan de pago.",
        "expires_in": "Tu suscripción está a punto de caducar ({days}). Si no actúas, pierdes un fan de pago.",
        "cold_fan": "Fan frío: ha bajado el ritmo de mensajes y necesita un motivo para volver.",
        "cold_since": "No escribe desde hace {days} días.",
        "vip_buyer": "Fan muy implicado; ha invertido en extras y responde cuando le propones cosas.",
        "day": "día",
        "days": "días",
        "few_days": "pocos días",
        "chip_new": "NUEVO",
        "chip_medium_interest": "Interés medio",
        "chip_testing": "Probando",
        "chip_silent": "Silencioso",
        "chip_expires_today": "CADUCA HOY",
        "chip_critical": "Crítico",
        "chip_risk": "RIESGO",
        "chip_high_risk": "Riesgo alto",
        "chip_days_left": "{days} restantes",
        "chip_expires_soon": "Caduca en breve",
        "chip_cold": "FRÍO",
        "chip_low_activity": "Baja actividad",
        "chip_silent_days": "Sin escribir {days} días",
        "chip_vip": "VIP",
        "chip_high_engagement": "Alta implicación",
        "chip_extras": "{count} extras",
        "chip_spent": "{amount} € gastados",
    },
    "en": {
        "new_curious": "New fan who has already interacted. Still figuring out what they can get here.",
        "new_shy": "New, shy fan; has barely talked yet.",
        "expires_today": "Their subscription expires today. If you don't act, you lose a paying fan.",
        "expires_in": "Their subscription is about to expire ({days}). If you don't act, you lose a paying fan.",
        "cold_fan": "Cold fan: messaging has slowed down and they need a reason to come back.",
        "cold_since": "Hasn't written in {days} days.",
        "vip_buyer": "Highly engaged fan; has invested in extras and answers when you propose things.",
        "day": "day",
        "days": "days",
        "few_days": "a few days",
        "chip_new": "NEW",
        "chip_medium_interest": "Medium interest",
        "chip_testing": "Testing",
        "chip_silent": "Quiet",
        "chip_expires_today": "EXPIRES TODAY",
        "chip_critical": "Critical",
        "chip_risk": "RISK",
        "chip_high_risk": "High risk",
        "chip_days_left": "{days} left",
        "chip_expires_soon": "Expires soon",
        "chip_cold": "COLD",
        "chip_low_activity": "Low activity",
        "chip_silent_days": "Silent for {days} days",
        "chip_vip": "VIP",
        "chip_high_engagement": "High engagement",
        "chip_extras": "{count} extras",
        "chip_spent": "{amount} € spent",
    },
}


def _days_since(value: Optional[datetime], now: datetime) -> Optional[int]:
    if value is None:
        return None
    seconds = (now - value).total_seconds()
    if seconds < 0:
        return 0
    return int(seconds // 86400)


def _count_messages(messages: Iterable[Message]) -> tuple[int, int]:
    fan = creator = 0
    for msg in messages:
        if msg.kind == "system":
            continue
        if msg.is_fan:
            fan += 1
        elif msg.is_creator:
            creator += 1
    return fan, creator


def _days_label(days: Optional[int], copy: dict) -> str:
    if days is None:
        return copy["few_days"]
    return f"{days} {copy['day'] if days == 1 else copy['days']}"


def map_objective_for_state(state: str, context: FanStateContext) -> str:
    if state == "near_expiry":
        if (
            not context.has_active_monthly
            and not context.has_active_special
            and context.extras_count >= VIP_EXTRAS_COUNT_THRESHOLD
        ):
            return "push_monthly"
        return "renewal"
    if state == "vip_buyer":
        if not context.has_active_monthly and (
            context.extras_count >= MONTHLY_PUSH_EXTRAS_COUNT
            or context.extras_spent_total >= MONTHLY_PUSH_SPEND
            or context.lifetime_spend >= MONTHLY_PUSH_SPEND
        ):
            return "push_monthly"
        return "offer_extra"
    return OBJECTIVES.get(state, "offer_extra")


def build_headline(state: str, context: FanStateContext, lang: str = "es") -> str:
    copy = COPY[lang]
    if state == "near_expiry":
        if context.days_left is not None and context.days_left <= 0:
            return copy["expires_today"]
        return copy["expires_in"].format(days=_days_label(context.days_left, copy))
    if state == "cold_fan":
        if context.inactivity_days is not None:
            return copy["cold_since"].format(days=context.inactivity_days)
        return copy["cold_fan"]
    return copy.get(state, "")


def build_chips(state: str, context: FanStateContext, lang: str = "es") -> List[StateChip]:
    copy = COPY[lang]
    chips: List[StateChip] = []

    if state == "new_curious":
        chips.append(StateChip(copy["chip_new"], "info"))
        label = copy["chip_medium_interest"] if context.fan_messages_count > 1 else copy["chip_testing"]
        chips.append(StateChip(label, "info"))
    elif state == "new_shy":
        chips.append(StateChip(copy["chip_new"], "info"))
        chips.append(StateChip(copy["chip_silent"], "neutral"))
    elif state == "near_expiry":
        if context.days_left is not None and context.days_left <= 0:
            chips.append(StateChip(copy["chip_expires_today"], "danger"))
            chips.append(StateChip(copy["chip_critical"], "danger"))
        else:
            chips.append(StateChip(copy["chip_risk"], "danger"))
            chips.append(StateChip(copy["chip_high_risk"], "danger"))
            if context.days_left is not None:
                chips.append(StateChip(
                    copy["chip_days_left"].format(days=_days_label(context.days_left, copy)),
                    "danger" if context.days_left <= 1 else "warning",
                ))
            elif context.expiry_tag_soon:
                chips.append(StateChip(copy["chip_expires_soon"], "warning"))
    elif state == "cold_fan":
        chips.append(StateChip(copy["chip_cold"], "warning"))
        chips.append(StateChip(copy["chip_low_activity"], "neutral"))
        if context.inactivity_days is not None:
            chips.append(StateChip(copy["chip_silent_days"].format(days=context.inactivity_days), "warning"))
    elif state == "vip_buyer":
        chips.append(StateChip(copy["chip_vip"], "success"))
        chips.append(StateChip(copy["chip_high_engagement"], "success"))
        if context.extras_count > 0:
            chips.append(StateChip(copy["chip_extras"].format(count=context.extras_count), "info"))
        elif context.lifetime_spend > 0:
            chips.append(StateChip(copy["chip_spent"].format(amount=round_half_up(context.lifetime_spend)), "info"))

    return chips


def build_state_context(
    fan: FanSnapshot,
    messages: Optional[List[Message]] = None,
    now: Optional[datetime] = None,
) -> FanStateContext:
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    history = messages if messages else fan.messages
    fan_count, creator_count = _count_messages(history)

    grants = fan.active_grant_types
    follow_up_tag = fan.follow_up_tag
    expiry_tag_soon = follow_up_tag in EXPIRY_SOON_TAGS
    inactivity_days = _days_since(fan.last_seen_at, now)
    tier = fan.customer_tier

    is_new = bool(fan.is_new) or tier == "new"
    is_vip = (
        fan.is_high_priority
        or tier == "vip"
        or fan.extras_count >= VIP_EXTRAS_COUNT_THRESHOLD
        or fan.extras_spent_total >= VIP_SPENT_THRESHOLD
        or fan.lifetime_spend >= VIP_LTV_THRESHOLD
    )

    return FanStateContext(
        days_left=fan.days_left,
        inactivity_days=inactivity_days,
        extras_count=fan.extras_count,
        extras_spent_total=fan.extras_spent_total,
        lifetime_spend=fan.lifetime_spend,
        has_active_monthly=any("monthly" in t for t in grants),
        has_active_special=any("special" in t for t in grants),
        has_active_trial=any("trial" in t or "welcome" in t for t in grants),
        expiry_tag_soon=expiry_tag_soon,
        follow_up_tag=follow_up_tag,
        fan_messages_count=fan_count,
        creator_messages_count=creator_count,
        is_new=is_new,
        is_vip=is_vip,
        is_cold=inactivity_days is not None and inactivity_days >= COLD_DAYS_THRESHOLD,
        is_near_expiry=(fan.days_left is not None and fan.days_left <= NEAR_EXPIRY_DAYS) or expiry_tag_soon,
    )


def resolve_state(context: FanStateContext) -> str:
    # evaluated top to bottom; the first branch that holds decides
    if context.is_near_expiry:
        return "near_expiry"
    if not context.is_new and context.is_cold:
        return "cold_fan"
    if context.is_vip:
        return "vip_buyer"
    if context.is_new:
        return "new_curious" if context.fan_messages_count > 0 else "new_shy"
    if context.is_cold:
        return "cold_fan"
    if context.fan_messages_count == 0:
        return "new_shy"
    return "new_curious"


def derive_fan_state(
    fan: FanSnapshot,
    messages: Optional[List[Message]] = None,
    now: Optional[datetime] = None,
    lang: Optional[str] = "es",
) -> FanStateAnalysis:
    """
    Fan state, its default objective, a headline and status chips.
    Total over every snapshot: near expiry beats cold beats VIP beats new.
    """
    language = "en" if normalize_locale_base(lang) == "en" else "es"
    context = build_state_context(fan, messages=messages, now=now)
    state = resolve_state(context)
    log.debug("Fan state=%s context=%s", state, context)

    return FanStateAnalysis(
        state=state,
        objective=map_objective_for_state(state, context),
        headline=build_headline(state, context, language),
        chips=build_chips(state, context, language),
        context=context,
    )


def get_default_fan_tone(state: str) -> str:
    return DEFAULT_TONES.get(state, "intimate")
