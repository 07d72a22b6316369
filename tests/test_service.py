from __future__ import annotations

from pathlib import Path

import pytest

from tour_pricer.constants import PARAMS_STORAGE_KEY
from tour_pricer.engine.exceptions import PricingError
from tour_pricer.pricing.storage import JsonFileStore
from tour_pricer.service import PricingSession, create_session
from tour_pricer.settings import DATA_DIR_ENV, Settings


@pytest.fixture
def session(tmp_path: Path) -> PricingSession:
    """Create a session writing its documents under a temp dir."""
    return create_session(Settings.load(data_dir=tmp_path))


def test_current_prices_default_configuration(
    session: PricingSession,
) -> None:
    """Price the default two-person tour."""
    result = session.current()

    assert result.party_size == 2
    assert result.per_person == 4030
    assert result.group_total == 8060


def test_current_follows_store_updates(session: PricingSession) -> None:
    """Reprice from a fresh snapshot after every change."""
    session.store.set_pax(5)
    session.store.set_round_mode("groupThenDivide")

    result = session.current()

    # 2500 + 2500 + 2000 + 780 * 5
    assert result.group_total == 10900
    assert result.per_person == 2180.0
    assert result.vehicle_fee == 2500.0


def test_table_covers_all_party_sizes(session: PricingSession) -> None:
    """Return fifteen rows regardless of the configured party size."""
    session.store.set_pax(9)

    table = session.table()

    assert [row.party_size for row in table] == list(range(1, 16))


def test_save_and_load_quote(session: PricingSession) -> None:
    """Restore params from a saved quote, overwriting current edits."""
    session.store.set_pax(6)
    quote = session.save_quote("Family of six")
    session.store.set_pax(1)
    session.store.set_vat_enabled(True)

    loaded = session.load_quote(quote.id)

    assert loaded == quote
    assert session.store.params.pax == 6
    assert session.store.params.vat_enabled is False
    assert session.quotes() == [quote]


def test_delete_quote(session: PricingSession) -> None:
    """Remove a quote and reject loading it afterwards."""
    quote = session.save_quote("temporary")

    session.delete_quote(quote.id)

    assert session.quotes() == []
    with pytest.raises(PricingError):
        session.load_quote(quote.id)


def test_documents_written_to_data_dir(
    session: PricingSession, tmp_path: Path
) -> None:
    """Persist params as JSON files named by storage key."""
    session.store.set_guide_fee(2600)

    assert (tmp_path / f"{PARAMS_STORAGE_KEY}.json").exists()
    reopened = create_session(Settings.load(data_dir=tmp_path))
    assert reopened.store.params.guide_fee == 2600.0


def test_export_and_breakdown(session: PricingSession) -> None:
    """Render the table as CSV and describe the current costs."""
    csv_text = session.export_csv("en")
    breakdown = session.breakdown("en")

    assert csv_text.splitlines()[2] == "2,4030,8060,2000,Yes,Yes"
    assert breakdown[0].startswith("Fixed costs: ฿2,500 (Guide)")


def test_settings_read_data_dir_from_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    """Use the data dir named by the environment when none is given."""
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "quotes"))

    settings = Settings.load()

    assert settings.data_dir == tmp_path / "quotes"
    assert (settings.schema_dir / "params.schema.json").exists()


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    """Store, read back and delete one document per key."""
    storage = JsonFileStore(tmp_path / "docs")

    assert storage.get("missing") is None
    storage.set("quotes", "[]")
    assert storage.get("quotes") == "[]"
    assert not list((tmp_path / "docs").glob("*.tmp"))

    storage.delete("quotes")
    storage.delete("quotes")
    assert storage.get("quotes") is None

    with pytest.raises(ValueError):
        storage.get("../escape")
