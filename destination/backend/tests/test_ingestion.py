"""
Tests for OpenStreetMap ingestion: Overpass fetching, element transforms, batch loading and history.
"""

import json
from io import StringIO
from unittest.mock import patch, Mock

import pytest
import requests
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.ingestion import transform as tf
from apps.ingestion.loader import load_records
from apps.ingestion.models import DataIngestionHistory
from apps.ingestion.overpass import build_query, fetch, OverpassError
from apps.ingestion.pipeline import run_ingestion, clear_ingested, normalize_types
from apps.listings.models import Hotel, Restaurant, Attraction, Sports

HOTELS = {"elements": [
    {"type": "node", "id": 101, "lat": 22.5726, "lon": 88.3639, "tags": {
        "tourism": "hotel", "name": "Great Eastern Heritage", "stars": "5",
        "phone": "+91 33 1234 5678", "contact:phone": "+91 33 1234 5678", "internet_access": "yes",
        "swimming_pool": "yes", "addr:suburb": "Dalhousie", "addr:postcode": "700001",
    }},
    {"type": "way", "id": 202, "center": {"lat": 22.55, "lon": 88.35}, "tags": {
        "tourism": "guest_house", "name": "Sudder Street Lodge",
    }},
    {"type": "node", "id": 303, "lat": 22.56, "lon": 88.36, "tags": {"tourism": "hotel"}},
    {"type": "node", "id": 404, "tags": {"tourism": "hotel", "name": "Nowhere Inn"}},
]}

RESTAURANTS = {"elements": [
    {"type": "node", "id": 11, "lat": 22.55, "lon": 88.35, "tags": {
        "amenity": "restaurant", "name": "6 Ballygunge Place", "cuisine": "bengali;indian",
        "outdoor_seating": "yes",
    }},
    {"type": "node", "id": 12, "lat": 22.56, "lon": 88.36, "tags": {
        "amenity": "cafe", "name": "Indian Coffee House", "cuisine": "coffee_shop",
    }},
]}

ATTRACTIONS = {"elements": [
    {"type": "node", "id": 21, "lat": 22.5448, "lon": 88.3426, "tags": {
        "historic": "monument", "name": "Victoria Memorial", "wheelchair": "yes",
    }},
    {"type": "way", "id": 22, "center": {"lat": 22.6548, "lon": 88.3575}, "tags": {
        "amenity": "place_of_worship", "name": "Dakshineswar Kali Temple",
    }},
]}

SPORTS = {"elements": [
    {"type": "way", "id": 31, "center": {"lat": 22.5646, "lon": 88.3433}, "tags": {
        "leisure": "stadium", "name": "Eden Gardens", "sport": "cricket", "capacity": "68000",
        "lit": "yes",
    }},
]}


def overpass_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestOverpass:
    def test_query_covers_nodes_and_ways(self):
        query = build_query("hotels", "1,2,3,4")

        assert query.startswith("[out:json]")
        assert 'node["tourism"="hotel"](1,2,3,4);' in query
        assert 'way["tourism"="hostel"](1,2,3,4);' in query
        assert query.endswith("out center tags;")

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            build_query("castles")

    @patch("apps.ingestion.overpass.time.sleep")
    @patch("apps.ingestion.overpass.requests.post")
    def test_retries_then_succeeds(self, post, sleep):
        post.side_effect = [requests.ConnectionError("reset"), overpass_response(HOTELS)]

        payload = fetch("hotels", attempts=3)

        assert payload == HOTELS
        assert post.call_count == 2
        sleep.assert_called_once_with(1.5)

    @patch("apps.ingestion.overpass.time.sleep")
    @patch("apps.ingestion.overpass.requests.post")
    def test_gives_up(self, post, sleep):
        post.side_effect = requests.Timeout("slow")

        with pytest.raises(OverpassError):
            fetch("hotels", attempts=3)
        assert post.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.5, 3.0]


class TestTransform:
    def test_hotels(self):
        records = tf.transform("hotels", HOTELS)

        assert [r["osm_id"] for r in records] == ["node/101", "way/202"]
        heritage, lodge = records
        assert heritage["category"] == "Luxury"
        assert heritage["phones"] == ["+91 33 1234 5678"]
        assert heritage["amenities"] == ["WiFi", "Pool"]
        assert heritage["area"] == "Dalhousie"
        assert heritage["slug"] == "great-eastern-heritage-101"
        assert heritage["status"] == "pending"
        assert heritage["source"] == "OpenStreetMap"
        assert (lodge["latitude"], lodge["longitude"]) == (22.55, 88.35)
        assert lodge["category"] == "Budget"
        assert (lodge["price_min"], lodge["price_max"]) == (800, 3000)
        assert lodge["description"] == "A guest house in Kolkata"

    def test_restaurants(self):
        house, cafe = tf.transform("restaurants", RESTAURANTS)

        assert house["cuisine"] == ["Bengali"]
        assert house["price_range"] == "Mid-range"
        assert house["amenities"] == ["Outdoor Seating"]
        assert house["opening_hours"]["sunday"] == {"open": "09:00", "close": "21:00", "closed": False}
        assert cafe["cuisine"] == ["Coffee_shop"]
        assert cafe["price_range"] == "Budget"
        assert cafe["avg_meal_cost"] == 250

    def test_attractions(self):
        memorial, temple = tf.transform("attractions", ATTRACTIONS)

        assert memorial["category"] == "Historical"
        assert memorial["entry_fee"]["adult"] == 10
        assert memorial["accessibility"]["wheelchair_accessible"] is True
        assert temple["category"] == "Religious"
        assert temple["entry_fee"]["is_free"] is True
        assert temple["best_time_to_visit"] == "Morning or evening prayers"

    def test_sports(self):
        (eden,) = tf.transform("sports", SPORTS)

        assert eden["category"] == "Stadium"
        assert eden["sport"] == "cricket"
        assert eden["capacity"] == 68000
        assert eden["facilities"] == ["cricket", "Floodlights"]
        assert "Floodlights" in eden["amenities"]

    def test_hotel_categories(self):
        assert tf.categorize_hotel({"stars": "3"}) == "Business"
        assert tf.categorize_hotel({"stars": "two"}) == "Budget"
        assert tf.categorize_hotel({"name": "Sonar Bangla Resort"}) == "Resort"

    def test_normalize_types(self):
        assert normalize_types("all") == ["hotels", "restaurants", "attractions", "sports"]
        assert normalize_types("Hotels, sports") == ["hotels", "sports"]
        assert normalize_types(None) == normalize_types([])
        with pytest.raises(ValueError):
            normalize_types("hotels,castles")


@pytest.mark.django_db
class TestLoader:
    def test_skips_known_and_duplicate_ids(self):
        records = tf.transform("hotels", HOTELS)
        load_records(Hotel, records[:1])

        stats = load_records(Hotel, records + records, batch_size=1)

        assert stats["total"] == 4
        assert stats["success"] == 1
        assert stats["skipped"] == 3
        assert Hotel.objects.count() == 2
        assert set(Hotel.objects.values_list("status", flat=True)) == {"pending"}

    def test_bad_record_falls_back_to_single_inserts(self, hotel):
        records = tf.transform("hotels", HOTELS)
        records[0]["slug"] = hotel.slug
        errors = []

        stats = load_records(Hotel, records, errors=errors)

        assert stats["success"] == 1
        assert stats["failed"] == 1
        assert errors[0]["record"] == "node/101"
        assert Hotel.objects.filter(osm_id="way/202").exists()


@pytest.mark.django_db
class TestPipeline:
    @patch("apps.ingestion.overpass.requests.post")
    def test_run_records_history(self, post, admin):
        post.return_value = overpass_response(RESTAURANTS)

        (result,) = run_ingestion("restaurants", initiated_by=admin)

        assert result["status"] == "success"
        assert result["stats"]["success"] == 2
        history = DataIngestionHistory.objects.get(pk=result["history_id"])
        assert history.records_processed == 2
        assert history.metadata["initiated_by"] == admin.email
        assert history.metadata["source"] == "OpenStreetMap"
        assert Restaurant.objects.filter(source="OpenStreetMap").count() == 2

    @patch("apps.ingestion.overpass.time.sleep")
    @patch("apps.ingestion.overpass.requests.post")
    def test_fetch_failure_recorded(self, post, sleep):
        post.side_effect = requests.ConnectionError("offline")

        (result,) = run_ingestion(["sports"])

        assert result["status"] == "failed"
        history = DataIngestionHistory.objects.get()
        assert history.status == "failed"
        assert "offline" in history.errors[0]["error"]

    def test_from_dir_and_dry_run(self, tmp_path):
        (tmp_path / "attractions.json").write_text(json.dumps(ATTRACTIONS), encoding="utf-8")

        (dry,) = run_ingestion("attractions", source_dir=tmp_path, dry_run=True)
        assert dry["status"] == "dry_run"
        assert dry["stats"]["total"] == 2
        assert not Attraction.objects.exists()
        assert not DataIngestionHistory.objects.exists()

        (real,) = run_ingestion("attractions", source_dir=tmp_path)
        assert real["stats"]["success"] == 2
        assert DataIngestionHistory.objects.get().metadata["source"] == "file"

    @patch("apps.ingestion.overpass.requests.post")
    def test_output_dir_saves_raw(self, post, tmp_path):
        post.return_value = overpass_response(SPORTS)

        run_ingestion("sports", output_dir=tmp_path / "raw")

        saved = json.loads((tmp_path / "raw" / "sports.json").read_text(encoding="utf-8"))
        assert saved == SPORTS

    def test_clear_only_removes_ingested(self, tmp_path, hotel):
        (tmp_path / "hotels.json").write_text(json.dumps(HOTELS), encoding="utf-8")
        run_ingestion("hotels", source_dir=tmp_path)

        deleted = clear_ingested("hotels")

        assert deleted == {"hotels": 2}
        assert list(Hotel.objects.all()) == [hotel]
        assert DataIngestionHistory.objects.filter(operation="delete").exists()


@pytest.mark.django_db
class TestIngestionCommand:
    def test_command_from_dir(self, tmp_path):
        (tmp_path / "sports.json").write_text(json.dumps(SPORTS), encoding="utf-8")
        out = StringIO()

        call_command("ingest_osm", "--types", "sports", "--from-dir", str(tmp_path), stdout=out)

        assert "✓ sports: success" in out.getvalue()
        assert Sports.objects.get().name == "Eden Gardens"

    def test_invalid_type(self):
        with pytest.raises(CommandError):
            call_command("ingest_osm", "--types", "castles")

    def test_missing_file_reported(self, tmp_path):
        out = StringIO()

        call_command("ingest_osm", "--types", "hotels", "--from-dir", str(tmp_path), stdout=out)

        assert "✗ hotels: failed" in out.getvalue()


@pytest.mark.django_db
class TestIngestionApi:
    @patch("apps.ingestion.overpass.requests.post")
    def test_admin_runs_ingestion(self, post, auth_client, admin):
        post.return_value = overpass_response(SPORTS)

        response = auth_client(admin).post("/api/admin/data-ingestion/", {"types": ["sports"]},
                                           format="json")

        assert response.status_code == 200
        assert response.data["results"][0]["status"] == "success"

    @patch("apps.ingestion.overpass.time.sleep")
    @patch("apps.ingestion.overpass.requests.post")
    def test_all_failed_is_502(self, post, sleep, auth_client, admin):
        post.side_effect = requests.ConnectionError("offline")

        response = auth_client(admin).post("/api/admin/data-ingestion/", {"types": "hotels"},
                                           format="json")

        assert response.status_code == 502

    def test_unknown_type_is_400(self, auth_client, admin):
        response = auth_client(admin).post("/api/admin/data-ingestion/", {"types": "castles"},
                                           format="json")

        assert response.status_code == 400

    def test_moderator_forbidden(self, auth_client, moderator):
        response = auth_client(moderator).post("/api/admin/data-ingestion/", {}, format="json")

        assert response.status_code == 403

    def test_history_and_stats(self, auth_client, admin, tmp_path):
        (tmp_path / "sports.json").write_text(json.dumps(SPORTS), encoding="utf-8")
        run_ingestion("sports", source_dir=tmp_path)
        client = auth_client(admin)

        history = client.get("/api/admin/data-ingestion-history/?data_type=sports")
        stats = client.get("/api/admin/data-ingestion-history/stats/")

        assert history.data["pagination"]["total"] == 1
        assert stats.data["totals"]["runs"] == 1
        assert stats.data["totals"]["successful"] == 1
        assert stats.data["by_status"] == {"success": 1}
        assert stats.data["last_run"]["data_type"] == "sports"
