"""Shared fixtures: the reference day-tour configuration and stores."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from tour_pricer.pricing.archive import QuoteArchive
from tour_pricer.pricing.models import DEFAULT_PARAMS, Params
from tour_pricer.pricing.repository import ConfigurationStore
from tour_pricer.pricing.storage import InMemoryStore

ROOT_DIR = Path(__file__).resolve().parents[1]
SCHEMA_DIR = ROOT_DIR / "schema"

# Grand Palace 500 + Wat Pho 200
TICKET_SUM = 700.0

FIXED_NOW = 1_700_000_000.0


@pytest.fixture
def base_params() -> Params:
    return replace(
        DEFAULT_PARAMS,
        pax=2,
        guide_fee=2500.0,
        car_tier1=2000.0,
        car_tier2=2200.0,
        car_tier3=2500.0,
        car_tier4=5000.0,
        boat_included=True,
        boat_fee=2000.0,
        drink_included=True,
        drink_fee_per_person=80.0,
        meal_enabled=False,
        vat_enabled=False,
        markup_enabled=False,
        round_mode="perPerson",
    )


@pytest.fixture
def storage() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def store(storage: InMemoryStore) -> ConfigurationStore:
    return ConfigurationStore(
        storage,
        schema_dir=SCHEMA_DIR,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def archive(storage: InMemoryStore) -> QuoteArchive:
    return QuoteArchive(
        storage,
        schema_dir=SCHEMA_DIR,
        clock=lambda: FIXED_NOW,
    )
