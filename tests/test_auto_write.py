"""
Unit tests for the write service.

Tests cover:
- Create with version 0 and atomic children
- Chassis number uniqueness on create and update
- Version-checked update, including a writer racing the check
- Idempotent, cascading delete
"""

import threading
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from autokatalog.db import Base, make_engine, make_session_factory
from autokatalog.models import Auto, AutoArt, Bezeichnung, Zubehoer
from autokatalog.services import auto_write
from autokatalog.services.auto_read import find_by_id
from autokatalog.services.auto_write import create, delete, update
from autokatalog.services.exceptions import AutoNotFound, DuplicateChassisNumber, VersionConflict


def count(db, model):
    return db.scalar(select(func.count()).select_from(model))


class TestCreate:
    def test_new_auto_has_version_zero(self, db, make_auto):
        auto_id = create(db, make_auto())

        assert auto_id > 0
        auto = find_by_id(db, auto_id)
        assert auto.version == 0
        assert auto.erzeugt is not None
        assert auto.aktualisiert is not None

    def test_children_are_persisted_with_owner(self, db, make_auto):
        auto_id = create(db, make_auto(zubehoere=[("Automatik", "ohne Schaltung"), ("Navi", None)]))

        bezeichnung = db.scalars(select(Bezeichnung)).one()
        zubehoere = db.scalars(select(Zubehoer).order_by(Zubehoer.id)).all()
        assert bezeichnung.auto_id == auto_id
        assert [(z.name, z.auto_id) for z in zubehoere] == [("Automatik", auto_id), ("Navi", auto_id)]

    def test_client_supplied_version_is_ignored(self, db, make_auto):
        auto = make_auto()
        auto.version = 7

        auto_id = create(db, auto)

        assert find_by_id(db, auto_id).version == 0

    def test_duplicate_chassis_number(self, db, make_auto):
        create(db, make_auto(fahrgestellnummer="WBAKC81020C456789"))

        with pytest.raises(DuplicateChassisNumber) as exc_info:
            create(db, make_auto(fahrgestellnummer="WBAKC81020C456789", titel="Zweites"))

        assert exc_info.value.fahrgestellnummer == "WBAKC81020C456789"
        assert "WBAKC81020C456789" in str(exc_info.value)
        assert count(db, Auto) == 1
        assert count(db, Bezeichnung) == 1

    def test_duplicate_caught_by_constraint_when_lookup_misses(self, db, make_auto, monkeypatch):
        """A writer committing between lookup and insert still yields DuplicateChassisNumber."""
        create(db, make_auto(fahrgestellnummer="RACE-1"))
        monkeypatch.setattr(auto_write, "_check_fahrgestellnummer", lambda *args, **kwargs: None)

        with pytest.raises(DuplicateChassisNumber):
            create(db, make_auto(fahrgestellnummer="RACE-1"))

        assert count(db, Auto) == 1


class TestUpdate:
    def test_increments_version_by_one(self, db, make_auto):
        auto_id = create(db, make_auto())

        assert update(db, auto_id, make_auto(art=AutoArt.LIMOUSINE), 0) == 1
        assert update(db, auto_id, make_auto(preis=Decimal("1.00")), 1) == 2

        auto = find_by_id(db, auto_id)
        assert auto.version == 2
        assert auto.preis == Decimal("1.00")

    def test_previous_version_conflicts(self, db, make_auto):
        auto_id = create(db, make_auto())
        update(db, auto_id, make_auto(), 0)

        with pytest.raises(VersionConflict) as exc_info:
            update(db, auto_id, make_auto(), 0)

        assert exc_info.value.auto_id == auto_id
        assert exc_info.value.version == 0
        assert find_by_id(db, auto_id).version == 1

    def test_future_version_conflicts(self, db, make_auto):
        auto_id = create(db, make_auto())

        with pytest.raises(VersionConflict):
            update(db, auto_id, make_auto(), 5)

    def test_missing_auto(self, db, make_auto):
        with pytest.raises(AutoNotFound) as exc_info:
            update(db, 999999, make_auto(), 0)

        assert exc_info.value.auto_id == 999999

    def test_replaces_root_fields_only(self, db, make_auto):
        auto_id = create(db, make_auto(titel="Alpha", zubehoere=[("Automatik", None)]))
        before = find_by_id(db, auto_id).erzeugt

        update(
            db,
            auto_id,
            make_auto(
                fahrgestellnummer="NEU-1",
                art=AutoArt.LIMOUSINE,
                preis=Decimal("444.44"),
                lieferbar=False,
                datum=None,
                titel="Ignoriert",
                zubehoere=[("Ignoriert", None)],
            ),
            0,
        )

        auto = find_by_id(db, auto_id)
        assert auto.fahrgestellnummer == "NEU-1"
        assert auto.art == AutoArt.LIMOUSINE
        assert auto.preis == Decimal("444.44")
        assert auto.lieferbar is False
        assert auto.datum is None
        assert auto.erzeugt == before
        assert auto.bezeichnung.bezeichnung == "Alpha"
        assert [z.name for z in auto.zubehoere] == ["Automatik"]

    def test_own_chassis_number_is_no_collision(self, db, make_auto):
        auto_id = create(db, make_auto(fahrgestellnummer="SELF-1"))

        assert update(db, auto_id, make_auto(fahrgestellnummer="SELF-1"), 0) == 1

    def test_chassis_number_of_other_auto(self, db, make_auto):
        create(db, make_auto(fahrgestellnummer="OTHER-1"))
        auto_id = create(db, make_auto(fahrgestellnummer="MINE-1"))

        with pytest.raises(DuplicateChassisNumber) as exc_info:
            update(db, auto_id, make_auto(fahrgestellnummer="OTHER-1"), 0)

        assert exc_info.value.fahrgestellnummer == "OTHER-1"
        auto = find_by_id(db, auto_id)
        assert auto.fahrgestellnummer == "MINE-1"
        assert auto.version == 0


class TestDelete:
    def test_second_delete_reports_not_performed(self, db, make_auto):
        auto_id = create(db, make_auto())

        assert delete(db, auto_id) is True
        assert delete(db, auto_id) is False

    def test_missing_auto_is_not_an_error(self, db):
        assert delete(db, 999999) is False

    def test_cascades_to_children(self, db, make_auto):
        auto_id = create(db, make_auto(zubehoere=[("Automatik", None), ("Navi", None)]))
        other_id = create(db, make_auto(fahrgestellnummer="KEEP-1", zubehoere=[("Navi", None)]))

        delete(db, auto_id)

        assert count(db, Auto) == 1
        assert count(db, Bezeichnung) == 1
        assert count(db, Zubehoer) == 1
        with pytest.raises(AutoNotFound):
            find_by_id(db, auto_id)
        assert find_by_id(db, other_id).bezeichnung is not None


def test_create_update_conflict_scenario(db, make_auto):
    auto_id = create(
        db,
        make_auto(fahrgestellnummer="WBAKC81020C456789", art=AutoArt.SUV, preis=Decimal("35000"), lieferbar=True),
    )
    assert find_by_id(db, auto_id).version == 0

    changed = make_auto(fahrgestellnummer="WBAKC81020C456789", art=AutoArt.LIMOUSINE, preis=Decimal("35000"))
    assert update(db, auto_id, changed, 0) == 1

    with pytest.raises(VersionConflict):
        update(db, auto_id, changed, 0)


class TestConcurrentUpdates:
    """Separate sessions on a file database, as concurrent requests would have."""

    @pytest.fixture
    def file_sessions(self, tmp_path):
        engine = make_engine(f"sqlite:///{tmp_path / 'autos.db'}", connect_args={"check_same_thread": False, "timeout": 30})
        Base.metadata.create_all(bind=engine)
        yield make_session_factory(engine)
        engine.dispose()

    def test_writer_between_check_and_write_wins(self, file_sessions, make_auto, monkeypatch):
        with file_sessions() as setup:
            auto_id = create(setup, make_auto())

        original_check = auto_write._check_fahrgestellnummer
        raced = []

        def racing_check(db, fahrgestellnummer, own_id=None):
            original_check(db, fahrgestellnummer, own_id)
            if not raced:
                raced.append(True)
                with file_sessions() as other:
                    assert update(other, auto_id, make_auto(), 0) == 1

        monkeypatch.setattr(auto_write, "_check_fahrgestellnummer", racing_check)

        with file_sessions() as db:
            with pytest.raises(VersionConflict):
                update(db, auto_id, make_auto(art=AutoArt.LIMOUSINE), 0)

        with file_sessions() as db:
            auto = find_by_id(db, auto_id)
            assert auto.version == 1
            assert auto.art == AutoArt.SUV

    def test_delete_between_check_and_write_is_not_found(self, file_sessions, make_auto, monkeypatch):
        with file_sessions() as setup:
            auto_id = create(setup, make_auto())

        original_check = auto_write._check_fahrgestellnummer

        def deleting_check(db, fahrgestellnummer, own_id=None):
            original_check(db, fahrgestellnummer, own_id)
            with file_sessions() as other:
                assert delete(other, auto_id) is True

        monkeypatch.setattr(auto_write, "_check_fahrgestellnummer", deleting_check)

        with file_sessions() as db:
            with pytest.raises(AutoNotFound) as exc_info:
                update(db, auto_id, make_auto(art=AutoArt.LIMOUSINE), 0)

        assert exc_info.value.auto_id == auto_id

    def test_exactly_one_of_many_wins(self, file_sessions, make_auto):
        with file_sessions() as setup:
            auto_id = create(setup, make_auto())

        results = []
        lock = threading.Lock()
        start = threading.Barrier(5)

        def worker(index):
            start.wait()
            with file_sessions() as db:
                try:
                    outcome = update(db, auto_id, make_auto(preis=Decimal(index + 1)), 0)
                except VersionConflict:
                    outcome = "conflict"
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=worker, args=(index,)) for index in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results, key=str) == [1, "conflict", "conflict", "conflict", "conflict"]
        with file_sessions() as db:
            assert find_by_id(db, auto_id).version == 1
