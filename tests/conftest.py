import json
from pathlib import Path

import pytest

from cardwise.domain.models import CalculationPreferences, CreditCardOffer, SpendingEntry

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_CATALOG_PATH = PROJECT_ROOT / "data" / "catalog" / "sample_catalog.json"


def _card(card_id: str, **overrides) -> CreditCardOffer:
    payload = {"id": card_id, "name": overrides.pop("name", card_id.replace("-", " ").title())}
    payload.update(overrides)
    return CreditCardOffer.model_validate(payload)


@pytest.fixture
def make_card():
    return _card


@pytest.fixture
def spend():
    def _spend(category_id: str, monthly_spend: float, sub_category_id: str | None = None) -> SpendingEntry:
        return SpendingEntry(category_id=category_id, sub_category_id=sub_category_id, monthly_spend=monthly_spend)

    return _spend


@pytest.fixture
def prefs() -> CalculationPreferences:
    return CalculationPreferences()


@pytest.fixture
def sample_catalog_path() -> Path:
    return SAMPLE_CATALOG_PATH


@pytest.fixture
def catalog_file(tmp_path):
    def _write(cards: list[dict], categories: list[dict] | None = None) -> Path:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"categories": categories or [], "cards": cards}), encoding="utf-8")
        return path

    return _write
