"""
Tests for collection/filters.py — LocationFilter cascade and persistence
"""
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from collection.controller import RemoteCollectionController
from collection.filters import LocationFilter
from tests.fakes import FakeResource


class TestCascade:
    def test_region_clears_district_and_station(self):
        f = LocationFilter()
        f.set_region("1")
        f.set_district("10")
        f.set_station("100")
        f.set_region("2")
        assert (f.region, f.district, f.station) == ("2", "", "")

    def test_district_clears_station(self):
        f = LocationFilter()
        f.set_region("1")
        f.set_district("10")
        f.set_station("100")
        f.set_district("11")
        assert (f.region, f.district, f.station) == ("1", "11", "")

    def test_station_keeps_parents(self):
        f = LocationFilter()
        f.set_region("1")
        f.set_district("10")
        f.set_station(100)
        assert f.params() == {"region": "1", "district": "10", "station": "100"}

    def test_params_skip_empty(self):
        f = LocationFilter()
        assert f.params() == {}
        f.set_region("1")
        assert f.params() == {"region": "1"}

    def test_clear(self):
        f = LocationFilter()
        f.set_region("1")
        f.clear()
        assert f.params() == {}


class TestSubscribers:
    def test_notified_on_change_only(self):
        f = LocationFilter()
        seen = []
        f.subscribe(seen.append)
        f.set_region("1")
        f.set_region("1")
        f.set_district("10")
        assert seen == [{"region": "1"}, {"region": "1", "district": "10"}]

    def test_unsubscribe(self):
        f = LocationFilter()
        seen = []
        unsubscribe = f.subscribe(seen.append)
        unsubscribe()
        f.set_region("1")
        assert seen == []


class TestPersistence:
    def test_saved_and_restored(self, tmp_path):
        path = tmp_path / "filters.json"
        f = LocationFilter(path)
        f.set_region("1")
        f.set_district("10")
        assert json.loads(path.read_text()) == {"region": "1", "district": "10", "station": ""}

        restored = LocationFilter(path)
        assert restored.params() == {"region": "1", "district": "10"}

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "filters.json"
        f = LocationFilter(path)
        f.set_region("1")
        f.clear()
        assert not path.exists()

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "filters.json"
        path.write_text("{not json")
        f = LocationFilter(path)
        assert f.params() == {}

    def test_non_object_file_ignored(self, tmp_path, caplog):
        path = tmp_path / "filters.json"
        path.write_text('["1", "10"]')
        with caplog.at_level("WARNING", logger="collection.filters"):
            f = LocationFilter(path)
        assert f.params() == {}
        assert "Ignoring unreadable filter store" in caplog.text

    def test_no_store_path_writes_nothing(self, tmp_path):
        f = LocationFilter()
        f.set_region("1")
        assert list(tmp_path.iterdir()) == []


class TestBindController:
    def test_changes_reach_controller(self):
        async def main():
            fake = FakeResource()
            c = RemoteCollectionController(fake, search_debounce=0.2)
            f = LocationFilter()
            f.set_region("1")
            unbind = f.bind_controller(c)
            await fake.wait_for_calls(1)
            assert fake.calls[0] == {"region": "1", "page": 1, "page_size": 10}

            f.set_district("10")
            await fake.wait_for_calls(2)
            assert fake.calls[1]["district"] == "10"
            assert c.view_state.page == 1

            unbind()
            f.set_station("100")
            await asyncio.sleep(0)
            assert c.view_state.filters == {"region": "1", "district": "10"}
            c.close()

        asyncio.run(main())
