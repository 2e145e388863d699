from collections.abc import Iterable, Mapping
from typing import NamedTuple

from cardwise.domain.errors import CatalogIntegrityError
from cardwise.domain.models import CapPeriod, CreditCardOffer, RewardRule, SpendingCategory

PERIODS_PER_YEAR: dict[CapPeriod, int] = {
    CapPeriod.MONTHLY: 12,
    CapPeriod.QUARTERLY: 4,
    CapPeriod.YEARLY: 1,
}


class ResolvedRate(NamedTuple):
    rate: float
    rule: RewardRule | None
    reason: str


def subcategory_parents(categories: Iterable[SpendingCategory]) -> dict[str, str]:
    parents: dict[str, str] = {}
    for category in categories:
        for sub in category.sub_categories:
            parents[sub.id] = category.id
    return parents


def annual_cap(rule: RewardRule | None) -> float | None:
    """Cap on the annualized reward of one category, or None when unbounded."""
    if rule is None or rule.cap is None or rule.period is None:
        return None
    return rule.cap * PERIODS_PER_YEAR[rule.period]


def apply_cap(raw_annual_value: float, rule: RewardRule | None) -> tuple[float, bool]:
    limit = annual_cap(rule)
    if limit is None or raw_annual_value <= limit:
        return raw_annual_value, False
    return limit, True


def _keep_higher(current: RewardRule | None, candidate: RewardRule) -> RewardRule:
    if current is None or candidate.rate > current.rate:
        return candidate
    return current


class RewardRuleResolver:
    """Strict (category, sub-category) lookup over one card's reward rules.

    Specificity order: matching sub-category rule, then category rule, then
    the card's base reward. Rules sharing a level resolve to the highest rate.
    """

    def __init__(self, offer: CreditCardOffer, parents: Mapping[str, str] | None = None):
        self.offer = offer
        self._parents = parents or {}
        self._by_category: dict[str, RewardRule] = {}
        self._by_sub_category: dict[tuple[str, str], RewardRule] = {}
        self._index_rules()

    def _fail(self, message: str) -> CatalogIntegrityError:
        return CatalogIntegrityError(self.offer.id, f"{self.offer.name}: {message}")

    def _index_rules(self) -> None:
        if self.offer.base_reward < 0:
            raise self._fail(f"negative base reward {self.offer.base_reward}")

        declared_parent: dict[str, str] = {}
        for rule in self.offer.reward_rules:
            if rule.rate < 0:
                raise self._fail(f"negative rate {rule.rate} for category '{rule.category_id}'")
            if rule.cap is not None and rule.cap < 0:
                raise self._fail(f"negative cap {rule.cap} for category '{rule.category_id}'")

            if rule.sub_category_id is None:
                self._by_category[rule.category_id] = _keep_higher(
                    self._by_category.get(rule.category_id), rule
                )
                continue

            sub_id = rule.sub_category_id
            known_parent = self._parents.get(sub_id)
            if known_parent is not None and known_parent != rule.category_id:
                raise self._fail(
                    f"sub-category '{sub_id}' belongs to '{known_parent}', not '{rule.category_id}'"
                )
            first_parent = declared_parent.setdefault(sub_id, rule.category_id)
            if first_parent != rule.category_id:
                raise self._fail(
                    f"sub-category '{sub_id}' declared under both '{first_parent}' and '{rule.category_id}'"
                )

            key = (rule.category_id, sub_id)
            self._by_sub_category[key] = _keep_higher(self._by_sub_category.get(key), rule)

    def resolve(self, category_id: str, sub_category_id: str | None = None) -> ResolvedRate:
        if sub_category_id is not None:
            rule = self._by_sub_category.get((category_id, sub_category_id))
            if rule is not None:
                return ResolvedRate(rule.rate, rule, f"matched sub-category '{sub_category_id}'")

        rule = self._by_category.get(category_id)
        if rule is not None:
            return ResolvedRate(rule.rate, rule, f"matched category '{category_id}'")

        return ResolvedRate(self.offer.base_reward, None, "fallback to base reward")


def resolve(
    offer: CreditCardOffer,
    category_id: str,
    sub_category_id: str | None = None,
    parents: Mapping[str, str] | None = None,
) -> float:
    return RewardRuleResolver(offer, parents).resolve(category_id, sub_category_id).rate
