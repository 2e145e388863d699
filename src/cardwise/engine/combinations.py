import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from itertools import accumulate

from cardwise.domain.results import CardValueResult

logger = logging.getLogger(__name__)

DEFAULT_SIZES = (2, 3)
BRUTE_FORCE_THRESHOLD = 40
SAFETY_MARGIN = 0.01


def upper_bound(card: CardValueResult, include_annual_fees: bool = True) -> float:
    """Net value of the card if it were assigned every spending category.

    Summed over a subset this never undershoots the subset's real strategy
    value, since the allocation can only pick one card per category. Benefits
    count at no less than zero: a shared benefit with a negative personal
    value is counted once in a strategy, which can raise it above the sum.
    """
    fee = card.annual_fee if include_annual_fees else 0.0
    gross = sum(row.annual_value for row in card.per_category_breakdown)
    benefits = sum(max(row.personal_value, 0.0) for row in card.benefits_breakdown if row.counted)
    return gross + benefits + card.signup_bonus_amortized_value - fee


class CombinationEnumerator:
    """Lazily yields card-id subsets, largest upper bounds first.

    Catalogs above ``brute_force_threshold`` cards are pruned against the
    ``floor`` callable: a branch stops once no completion can reach
    ``floor() - safety_margin``.
    """

    def __init__(
        self,
        cards: Sequence[CardValueResult],
        include_annual_fees: bool = True,
        brute_force_threshold: int = BRUTE_FORCE_THRESHOLD,
        safety_margin: float = SAFETY_MARGIN,
    ):
        bounds = {card.card_id: upper_bound(card, include_annual_fees) for card in cards}
        self.order = sorted(bounds, key=lambda card_id: (-bounds[card_id], card_id))
        self.bounds = [bounds[card_id] for card_id in self.order]
        self._prefix = [0.0, *accumulate(self.bounds)]
        self.brute_force_threshold = brute_force_threshold
        self.safety_margin = safety_margin
        self.emitted = 0
        self.pruned_branches = 0

    @property
    def prunes(self) -> bool:
        return len(self.order) > self.brute_force_threshold

    def subsets(
        self,
        sizes: Iterable[int] = DEFAULT_SIZES,
        floor: Callable[[], float] | None = None,
    ) -> Iterator[tuple[str, ...]]:
        active_floor = floor if self.prunes else None
        for size in sorted(set(sizes)):
            if size < 1 or size > len(self.order):
                continue
            yield from self._extend((), 0, size, 0.0, active_floor)
        logger.debug(
            "Enumerated %d subsets from %d cards (%d branches pruned)",
            self.emitted,
            len(self.order),
            self.pruned_branches,
        )

    def _extend(
        self,
        prefix: tuple[str, ...],
        start: int,
        size: int,
        partial: float,
        floor: Callable[[], float] | None,
    ) -> Iterator[tuple[str, ...]]:
        remaining = size - len(prefix)
        if remaining == 0:
            self.emitted += 1
            yield prefix
            return

        for index in range(start, len(self.order) - remaining + 1):
            if floor is not None:
                best_completion = partial + self._prefix[index + remaining] - self._prefix[index]
                if best_completion < floor() - self.safety_margin:
                    # Bounds only shrink further along the order.
                    self.pruned_branches += 1
                    break
            yield from self._extend(
                prefix + (self.order[index],),
                index + 1,
                size,
                partial + self.bounds[index],
                floor,
            )


def enumerate_subsets(
    cards: Sequence[CardValueResult],
    sizes: Iterable[int] = DEFAULT_SIZES,
    floor: Callable[[], float] | None = None,
    include_annual_fees: bool = True,
    brute_force_threshold: int = BRUTE_FORCE_THRESHOLD,
    safety_margin: float = SAFETY_MARGIN,
) -> Iterator[tuple[str, ...]]:
    enumerator = CombinationEnumerator(cards, include_annual_fees, brute_force_threshold, safety_margin)
    return enumerator.subsets(sizes, floor)
