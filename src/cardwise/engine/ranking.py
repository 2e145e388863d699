import math
from bisect import insort
from collections.abc import Iterable

from cardwise.domain.results import MultiCardStrategy


def rank_key(strategy: MultiCardStrategy) -> tuple[float, float, int, tuple[str, ...]]:
    # Card ids close the order so equal-valued strategies never depend on arrival order.
    return (
        -strategy.total_net_annual_value,
        strategy.total_annual_fees,
        len(strategy.card_ids),
        tuple(strategy.card_ids),
    )


def describe(strategy: MultiCardStrategy) -> str:
    parts = []
    for usage in strategy.card_usage:
        if usage.assigned_categories:
            parts.append(f"use {usage.card_name} for {', '.join(usage.assigned_categories)}")
        else:
            parts.append(f"keep {usage.card_name} for its benefits and signup bonus")
    text = "; ".join(parts)
    return text[:1].upper() + text[1:] + "." if text else ""


def rank(strategies: Iterable[MultiCardStrategy], limit: int) -> list[MultiCardStrategy]:
    """Top ``limit`` strategies, named and numbered in rank order."""
    ordered = sorted(strategies, key=rank_key)[:limit]

    ranked: list[MultiCardStrategy] = []
    named_sizes: set[int] = set()
    for position, strategy in enumerate(ordered, start=1):
        size = len(strategy.card_ids)
        if size in named_sizes:
            name = f"{size}-Card Combination"
        else:
            name = f"Best {size}-Card Combination"
            named_sizes.add(size)
        ranked.append(
            strategy.model_copy(update={"rank": position, "strategy_name": name, "description": describe(strategy)})
        )
    return ranked


class StrategyBoard:
    """Running top-N of evaluated strategies."""

    def __init__(self, limit: int):
        self.limit = limit
        self._entries: list[MultiCardStrategy] = []

    def __len__(self) -> int:
        return len(self._entries)

    def offer(self, strategy: MultiCardStrategy) -> None:
        insort(self._entries, strategy, key=rank_key)
        if len(self._entries) > self.limit:
            self._entries.pop()

    def floor(self) -> float:
        """Value a new strategy has to reach to make the board."""
        if len(self._entries) < self.limit:
            return -math.inf
        return self._entries[-1].total_net_annual_value

    def strategies(self) -> list[MultiCardStrategy]:
        return list(self._entries)
