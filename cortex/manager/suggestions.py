from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from cortex.schemas.labels import HEAT_LABELS, heat_label_for
from cortex.schemas.results import Suggestion, SuggestionChip
from cortex.utils.locale import normalize_locale_base
from cortex.utils.timestamps import ensure_utc, finite_or_zero, parse_date

RECENT_PURCHASE_WINDOW = timedelta(hours=24)
STALE_INBOUND_AFTER = timedelta(days=3)
MIN_CHIPS = 3
MAX_CHIPS = 5
DEFAULT_CHIP_KEYS = ["simple_question", "ask_preference", "light_offer"]

INTENT_LABELS: Dict[str, Dict[str, str]] = {
    "es": {
        "GREETING": "Saludo",
        "FLIRT": "Coqueteo",
        "CONTENT_REQUEST": "Contenido",
        "CUSTOM_REQUEST": "Custom",
        "PRICE_ASK": "Precio",
        "BUY_NOW": "Compra",
        "SUBSCRIBE": "Suscribir",
        "CANCEL": "Cancelar",
        "OFF_PLATFORM": "Off-platform",
        "SUPPORT": "Soporte",
        "OBJECTION": "Objeción",
        "RUDE_OR_HARASS": "Grosero",
        "UNSAFE_MINOR": "Menor",
        "OTHER": "Otro",
    },
    "en": {
        "GREETING": "Greeting",
        "FLIRT": "Flirt",
        "CONTENT_REQUEST": "Content",
        "CUSTOM_REQUEST": "Custom",
        "PRICE_ASK": "Price",
        "BUY_NOW": "Buy",
        "SUBSCRIBE": "Subscribe",
        "CANCEL": "Cancel",
        "OFF_PLATFORM": "Off-platform",
        "SUPPORT": "Support",
        "OBJECTION": "Objection",
        "RUDE_OR_HARASS": "Rude",
        "UNSAFE_MINOR": "Minor",
        "OTHER": "Other",
    },
}

# key -> (label, text)
NEXT_ACTION_COPY: Dict[str, Dict[str, tuple]] = {
    "es": {
        "SEND_PAYMENT_LINK": ("Enviar link", "Si quieres, te paso el link para completar el pago."),
        "OFFER_EXTRA": ("Ofrecer extra", "Tengo un extra que puede encajar. ¿Te lo muestro?"),
        "BREAK_ICE": ("Romper el hielo", "Hola, ¿qué tal tu día?"),
        "BUILD_RAPPORT": ("Construir rapport", "Quiero conocerte un poco más. ¿Qué te apetece hoy?"),
        "PUSH_MONTHLY": ("Llevar a mensual", "Si te interesa, puedo pasarte el plan mensual con todo incluido."),
        "SUPPORT": ("Soporte", "Te ayudo con el acceso. ¿Qué error te aparece?"),
        "SAFETY": ("Seguridad", "Antes de seguir, necesito confirmar que eres mayor de 18."),
        "RESOLVE_OBJECTION": ("Resolver objeción", "Te entiendo. ¿Qué te preocupa en concreto?"),
        "THANK_DELIVERY": ("Agradecer + entregar", "¡Gracias! Te entrego el acceso ahora mismo."),
    },
    "en": {
        "SEND_PAYMENT_LINK": ("Send link", "If you want, I can send the link to complete payment."),
        "OFFER_EXTRA": ("Offer extra", "I have an extra that fits. Want me to show it?"),
        "BREAK_ICE": ("Break the ice", "Hey, how's your day going?"),
        "BUILD_RAPPORT": ("Build rapport", "I'd like to know you better. What are you in the mood for today?"),
        "PUSH_MONTHLY": ("Go monthly", "If you're into it, I can share the monthly plan with everything included."),
        "SUPPORT": ("Support", "I can help with access. What error do you see?"),
        "SAFETY": ("Safety", "Before we continue, I need to confirm you're 18+."),
        "RESOLVE_OBJECTION": ("Resolve objection", "I get it. What concerns you most?"),
        "THANK_DELIVERY": ("Thank + deliver", "Thank you! I'm delivering access right now."),
    },
}

CHIP_COPY: Dict[str, Dict[str, tuple]] = {
    "es": {
        "pass_options": ("Pasar opciones", "Te paso opciones rápidas para elegir."),
        "send_link": ("Enviar link", "¿Quieres que te mande el link ahora?"),
        "soft_close": ("Cierre suave", "Lo dejamos listo y seguimos cuando me digas."),
        "resolve_question": ("Resolver duda", "¿Qué duda quieres resolver antes de avanzar?"),
        "simple_question": ("Pregunta simple", "¿Cómo va tu día?"),
        "reactivate_short": ("Reactivar corto", "¿Sigues por aquí? Tengo algo rápido para ti."),
        "light_offer": ("Oferta ligera", "Si te apetece, tengo una opción ligera."),
        "clarify": ("Aclarar", "Cuéntame qué te preocupa y lo aclaro."),
        "validate": ("Validar", "Te entiendo, vamos a tu ritmo."),
        "options": ("Opciones", "Puedo darte opciones más simples si te ayuda."),
        "limits": ("Límites", "Si prefieres, lo dejamos aquí y seguimos luego."),
        "ask_detail": ("Pedir detalle", "¿Qué error te aparece exactamente?"),
        "support_steps": ("Pasos", "Te dejo los pasos para resolverlo."),
        "confirm": ("Confirmar", "Cuando lo pruebes, me confirmas y sigo contigo."),
        "safety_check": ("Confirmar edad", "Antes de seguir, necesito confirmar que eres mayor de 18."),
        "safety_policy": ("Normas", "Por seguridad, solo puedo continuar con mayores de 18."),
        "thanks": ("Gracias", "¡Gracias! Ya lo preparo para ti."),
        "deliver_access": ("Entrego acceso", "Te entrego el acceso ahora mismo."),
        "anything_else": ("¿Algo más?", "¿Quieres algo más o alguna preferencia?"),
        "ask_preference": ("Pedir preferencia", "Dime qué te apetece y te propongo algo a tu gusto."),
    },
    "en": {
        "pass_options": ("Share options", "I can share quick options for you to choose."),
        "send_link": ("Send link", "Do you want me to send the link now?"),
        "soft_close": ("Soft close", "We can keep it ready and continue whenever you want."),
        "resolve_question": ("Resolve question", "What question should I clear up before we move on?"),
        "simple_question": ("Simple question", "How's your day going?"),
        "reactivate_short": ("Quick reactivation", "Still around? I have something quick for you."),
        "light_offer": ("Light offer", "If you want, I have a light option."),
        "clarify": ("Clarify", "Tell me what's worrying you and I'll clarify it."),
        "validate": ("Validate", "I get it, let's go at your pace."),
        "options": ("Options", "I can offer simpler options if that helps."),
        "limits": ("Boundaries", "If you prefer, we can pause and continue later."),
        "ask_detail": ("Ask detail", "What exact error are you seeing?"),
        "support_steps": ("Steps", "I'll share the steps to fix it."),
        "confirm": ("Confirm", "Once you try it, let me know and I'll keep helping."),
        "safety_check": ("Confirm age", "Before we continue, I need to confirm you're 18+."),
        "safety_policy": ("Rules", "For safety, I can only continue with 18+."),
        "thanks": ("Thanks", "Thank you! I'm getting it ready for you."),
        "deliver_access": ("Deliver access", "I'll deliver access right now."),
        "anything_else": ("Anything else?", "Anything else you want or a preference?"),
        "ask_preference": ("Ask preference", "Tell me what you're in the mood for and I'll tailor it."),
    },
}

ACTION_KEYS = frozenset(NEXT_ACTION_COPY["es"])

INTENT_ACTIONS = {
    "SUPPORT": "SUPPORT",
    "UNSAFE_MINOR": "SAFETY",
    "OBJECTION": "RESOLVE_OBJECTION",
    "BUY_NOW": "SEND_PAYMENT_LINK",
    "PRICE_ASK": "OFFER_EXTRA",
}

BUCKET_ACTIONS = {
    "HOT": "OFFER_EXTRA",
    "WARM": "BUILD_RAPPORT",
    "COLD": "BREAK_ICE",
}


def resolve_suggestion_language(value: Optional[str]) -> str:
    return "en" if normalize_locale_base(value) == "en" else "es"


def _normalize_upper(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().upper()
    return normalized or None


def resolve_bucket(bucket: Optional[str], score: Any = None) -> Optional[str]:
    normalized = _normalize_upper(bucket)
    if normalized in HEAT_LABELS:
        return normalized
    if isinstance(score, (int, float)) and not isinstance(score, bool):
        return heat_label_for(finite_or_zero(score))
    return None


def resolve_next_action_key(
    manual_action: Optional[str],
    intent: Optional[str],
    bucket: Optional[str],
    has_recent_purchase: bool,
) -> Optional[str]:
    if manual_action in ACTION_KEYS:
        return manual_action
    if has_recent_purchase:
        return "THANK_DELIVERY"
    if intent in INTENT_ACTIONS:
        return INTENT_ACTIONS[intent]
    if intent == "GREETING" and bucket == "COLD":
        return "BREAK_ICE"
    return BUCKET_ACTIONS.get(bucket)


def resolve_chip_keys(
    intent: Optional[str],
    bucket: Optional[str],
    has_recent_purchase: bool,
    is_stale_inbound: bool,
) -> List[str]:
    if has_recent_purchase:
        return ["thanks", "deliver_access", "anything_else"]
    if intent == "UNSAFE_MINOR":
        return ["safety_check", "safety_policy", "soft_close"]
    if intent == "SUPPORT":
        return ["ask_detail", "support_steps", "confirm"]
    if intent == "OBJECTION":
        return ["clarify", "validate", "options", "limits"]
    if intent in ("BUY_NOW", "PRICE_ASK") or bucket == "HOT":
        return ["pass_options", "send_link", "soft_close", "resolve_question"]
    if intent == "GREETING" and bucket == "COLD":
        return ["simple_question", "reactivate_short", "light_offer"]
    if bucket == "COLD":
        if is_stale_inbound:
            return ["reactivate_short", "simple_question", "light_offer"]
        return ["simple_question", "light_offer", "ask_preference"]
    if bucket == "WARM":
        return ["ask_preference", "simple_question", "light_offer"]
    return list(DEFAULT_CHIP_KEYS)


def build_chips(keys: List[str], language: str) -> List[SuggestionChip]:
    copy = CHIP_COPY[language]
    chips: List[SuggestionChip] = []
    seen = set()

    def add(key: str) -> None:
        if key in seen or key not in copy:
            return
        seen.add(key)
        label, text = copy[key]
        chips.append(SuggestionChip(key=key, label=label, insert_text=text))

    for key in keys:
        add(key)
    if len(chips) < MIN_CHIPS:
        for key in DEFAULT_CHIP_KEYS:
            add(key)
    return chips[:MAX_CHIPS]


def get_fan_suggestions(
    language: Optional[str] = None,
    temperature_bucket: Optional[str] = None,
    temperature_score: Optional[float] = None,
    last_intent_key: Optional[str] = None,
    next_action: Optional[str] = None,
    membership_status: Optional[str] = None,
    days_left: Optional[int] = None,
    last_purchase_at: Any = None,
    last_inbound_at: Any = None,
    now: Optional[datetime] = None,
) -> Suggestion:
    """
    Recommended next action plus quick-reply chips for the current fan.

    Cascade: manual action key, recent purchase, intent, heat bucket.
    Chips follow a parallel cascade, deduplicated and backfilled to 3, max 5.
    `membership_status` and `days_left` are accepted for callers that
    forward the whole fan row; they do not change the outcome.
    """
    lang = resolve_suggestion_language(language)
    intent = _normalize_upper(last_intent_key)
    bucket = resolve_bucket(temperature_bucket, temperature_score)
    now = ensure_utc(now) if now else datetime.now(timezone.utc)

    purchase_at = parse_date(last_purchase_at)
    inbound_at = parse_date(last_inbound_at)
    has_recent_purchase = purchase_at is not None and now - purchase_at <= RECENT_PURCHASE_WINDOW
    is_stale_inbound = inbound_at is not None and now - inbound_at >= STALE_INBOUND_AFTER

    key = resolve_next_action_key(_normalize_upper(next_action), intent, bucket, has_recent_purchase)
    label, text = NEXT_ACTION_COPY[lang].get(key, (key, None)) if key else (None, None)

    return Suggestion(
        language=lang,
        intent_label=INTENT_LABELS[lang].get(intent, intent) if intent else None,
        next_action_key=key,
        next_action_label=label,
        next_action_text=text,
        chips=build_chips(resolve_chip_keys(intent, bucket, has_recent_purchase, is_stale_inbound), lang),
    )
