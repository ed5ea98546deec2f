"""Tests for the shared repositories."""

import logging

import requests

from inventory.models import DeleteResult, NoticeDraft
from inventory.pipeline import quantity_equals


class TestLoad:
    """Test load-on-mount and failure handling."""

    def test_load_replaces_collection(self, fake_api, product_repo):
        fake_api.add_product(_id="a", quantity=1)
        assert product_repo.load() is True
        assert product_repo.loaded
        assert [r.id for r in product_repo.records] == ["a"]

    def test_failed_first_load_leaves_empty_collection(self, fake_api, product_repo):
        fake_api.fail("GET", "/produtos", requests.exceptions.ConnectionError("offline"))
        assert product_repo.load() is False
        assert product_repo.records == []
        assert not product_repo.loaded
        assert not product_repo.loading

    def test_failed_reload_keeps_previous_collection(self, fake_api, product_repo, caplog):
        fake_api.add_product(_id="a")
        product_repo.load()
        fake_api.add_product(_id="b")
        fake_api.fail("GET", "/produtos", 500)

        with caplog.at_level(logging.ERROR, logger="inventory"):
            assert product_repo.load() is False

        assert [r.id for r in product_repo.records] == ["a"]
        assert "Failed to load products" in caplog.text

    def test_records_is_a_snapshot(self, fake_api, product_repo):
        fake_api.add_product(_id="a")
        product_repo.load()
        product_repo.records.clear()
        assert len(product_repo.records) == 1

    def test_get_and_latest(self, fake_api, product_repo):
        fake_api.add_product(_id="a")
        fake_api.add_product(_id="b")
        product_repo.load()
        assert product_repo.get("a").id == "a"
        assert product_repo.get("zzz") is None
        assert product_repo.latest().id == "b"


class TestSubscribers:
    def test_subscribers_notified_on_load(self, fake_api, product_repo):
        seen = []
        product_repo.subscribe(lambda records: seen.append([r.id for r in records]))
        fake_api.add_product(_id="a")
        product_repo.load()
        assert seen == [["a"]]

    def test_not_notified_on_failure(self, fake_api, product_repo):
        seen = []
        product_repo.subscribe(seen.append)
        fake_api.fail("GET", "/produtos", 500)
        product_repo.load()
        assert seen == []

    def test_unsubscribe(self, fake_api, product_repo):
        seen = []
        product_repo.subscribe(seen.append)
        product_repo.unsubscribe(seen.append)
        product_repo.load()
        assert seen == []


class TestMutations:
    """Every mutation is followed by a full re-fetch."""

    def test_save_creates_and_reloads(self, fake_api, product_repo):
        product_repo.load()
        saved = product_repo.save({"name": "Solda", "description": "", "quantity": "1"})
        assert saved.name == "Solda"
        assert [r.name for r in product_repo.records] == ["Solda"]
        assert [c[0] for c in fake_api.calls] == ["GET", "POST", "GET"]

    def test_save_with_id_updates(self, fake_api, product_repo):
        fake_api.add_product(_id="a", name="old", quantity=1)
        product_repo.load()
        product_repo.save({"name": "new", "description": "", "quantity": "1"}, record_id="a")
        assert product_repo.get("a").name == "new"
        assert fake_api.calls_for("PUT")

    def test_delete_confirmed(self, fake_api, product_repo):
        fake_api.add_product(_id="a")
        product_repo.load()
        assert product_repo.delete("a") is DeleteResult.CONFIRMED
        assert product_repo.records == []

    def test_delete_failure_still_reloads(self, fake_api, product_repo):
        fake_api.add_product(_id="a")
        product_repo.load()
        fake_api.fail("DELETE", "/produtos", 500)

        assert product_repo.delete("a") is DeleteResult.FAILED
        assert [c[0] for c in fake_api.calls] == ["GET", "DELETE", "GET"]
        assert [r.id for r in product_repo.records] == ["a"]

    def test_view_filters_and_sorts_shared_collection(self, fake_api, product_repo):
        fake_api.add_product(_id="old", quantity=1)
        fake_api.add_product(_id="two", quantity=2)
        fake_api.add_product(_id="new", quantity=1)
        product_repo.load()
        assert [r.id for r in product_repo.view(quantity_equals(1))] == ["new", "old"]


class TestNoticeRepository:
    def test_notice_crud(self, fake_api, notice_repo):
        notice_repo.load()
        notice_repo.save(NoticeDraft("first"))
        record = notice_repo.records[0]
        notice_repo.save(NoticeDraft("edited"), record_id=record.id)
        assert notice_repo.records[0].notice == "edited"
        assert notice_repo.delete(record.id) is DeleteResult.CONFIRMED
        assert notice_repo.records == []
