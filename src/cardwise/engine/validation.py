import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cardwise.domain.errors import ValidationError
from cardwise.domain.models import (
    CardTier,
    CreditCardOffer,
    RewardPreference,
    RewardType,
    SpendingCategory,
    SpendingEntry,
    SubscriptionTier,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: object) -> ModelT:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"invalid {model.__name__}: {exc}") from exc


def validate_spending(
    spending_entries: Sequence[SpendingEntry],
    categories: Sequence[SpendingCategory] | None = None,
) -> None:
    known: dict[str, set[str]] | None = None
    if categories:
        known = {category.id: {sub.id for sub in category.sub_categories} for category in categories}

    seen: set[tuple[str, str | None]] = set()
    for entry in spending_entries:
        key = (entry.category_id, entry.sub_category_id)
        if not math.isfinite(entry.monthly_spend):
            raise ValidationError(f"monthly spend for '{entry.category_id}' is not a finite number")
        if entry.monthly_spend < 0:
            raise ValidationError(f"monthly spend for '{entry.category_id}' is negative: {entry.monthly_spend}")
        if key in seen:
            raise ValidationError(f"duplicate spending entry for {key}")
        seen.add(key)

        if known is None:
            continue
        if entry.category_id not in known:
            raise ValidationError(f"unknown category id '{entry.category_id}'")
        if entry.sub_category_id is not None and entry.sub_category_id not in known[entry.category_id]:
            raise ValidationError(
                f"sub-category '{entry.sub_category_id}' does not belong to '{entry.category_id}'"
            )


def validate_point_value(point_value_override: float | None) -> None:
    if point_value_override is None:
        return
    if not math.isfinite(point_value_override) or point_value_override <= 0:
        raise ValidationError(f"point value override must be positive, got {point_value_override}")


def validate_limit(limit: int, maximum: int | None = None) -> None:
    if limit < 1:
        raise ValidationError(f"limit must be at least 1, got {limit}")
    if maximum is not None and limit > maximum:
        raise ValidationError(f"limit must be at most {maximum}, got {limit}")


def coerce_choices(
    reward_preference: RewardPreference | str,
    subscription_tier: SubscriptionTier | str,
) -> tuple[RewardPreference, SubscriptionTier]:
    try:
        preference = RewardPreference(reward_preference)
    except ValueError as exc:
        raise ValidationError(f"unknown reward preference {reward_preference!r}") from exc
    try:
        tier = SubscriptionTier(subscription_tier)
    except ValueError as exc:
        raise ValidationError(f"unknown subscription tier {subscription_tier!r}") from exc
    return preference, tier


def matches_preference(offer: CreditCardOffer, preference: RewardPreference) -> bool:
    if preference == RewardPreference.BEST_OVERALL:
        return True
    if preference == RewardPreference.CASHBACK:
        return offer.reward_type == RewardType.CASHBACK
    if preference == RewardPreference.POINTS:
        return offer.reward_type == RewardType.POINTS
    raise ValidationError(f"unknown reward preference {preference!r}")


def visible_to(offer: CreditCardOffer, subscription_tier: SubscriptionTier) -> bool:
    if subscription_tier == SubscriptionTier.PREMIUM:
        return True
    if subscription_tier == SubscriptionTier.FREE:
        return offer.tier == CardTier.FREE
    raise ValidationError(f"unknown subscription tier {subscription_tier!r}")


def eligible_cards(
    catalog: Iterable[CreditCardOffer],
    reward_preference: RewardPreference,
    subscription_tier: SubscriptionTier,
    owned_card_ids: Iterable[str] = (),
) -> list[CreditCardOffer]:
    owned = set(owned_card_ids)
    return [
        offer
        for offer in catalog
        if offer.is_active
        and offer.id not in owned
        and matches_preference(offer, reward_preference)
        and visible_to(offer, subscription_tier)
    ]
