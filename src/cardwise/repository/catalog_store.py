import json
import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from cardwise.domain.errors import CatalogIntegrityError
from cardwise.domain.models import CardWarning, CatalogSnapshot, CreditCardOffer, SpendingCategory

logger = logging.getLogger(__name__)


def _describe(exc: PydanticValidationError) -> str:
    return "; ".join(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors())


class CatalogStore:
    def __init__(self, catalog_file: str):
        self.catalog_file = Path(catalog_file)

    def load_catalog(self) -> CatalogSnapshot:
        if not self.catalog_file.exists():
            raise FileNotFoundError(f"Catalog file not found: {self.catalog_file}")

        with self.catalog_file.open("r", encoding="utf-8") as fh:
            data = json.load(fh)

        # A bare list is a card list without a category taxonomy.
        if isinstance(data, list):
            data = {"cards": data}

        categories = [SpendingCategory.model_validate(item) for item in data.get("categories", [])]
        cards: list[CreditCardOffer] = []
        rejected: list[CardWarning] = []
        for index, raw in enumerate(data.get("cards", [])):
            try:
                cards.append(CreditCardOffer.model_validate(raw))
            except PydanticValidationError as exc:
                fields = raw if isinstance(raw, dict) else {}
                card_id = str(fields.get("id", f"#{index}"))
                logger.warning("Rejecting catalog card %s: %s", card_id, _describe(exc))
                rejected.append(
                    CardWarning(
                        card_id=card_id,
                        card_name=str(fields.get("name", card_id)),
                        error_type=CatalogIntegrityError.__name__,
                        message=_describe(exc),
                    )
                )

        snapshot = CatalogSnapshot(categories=categories, cards=cards, rejected=rejected)
        logger.debug(
            "Loaded %d cards (%d rejected) and %d categories from %s",
            len(snapshot.cards),
            len(snapshot.rejected),
            len(snapshot.categories),
            self.catalog_file,
        )
        return snapshot

    def load_cards(self) -> list[CreditCardOffer]:
        return self.load_catalog().cards
