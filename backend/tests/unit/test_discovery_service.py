"""Unit tests for venue classification and discovery.

Covers the classification rules, ranking, and the Overpass venue source
(against an ``httpx.MockTransport``).
"""

import httpx
import pytest

from pintfinder.models import (
    Confidence,
    Coordinates,
    DiscoveryError,
    DistanceQuality,
    NoVenuesFoundError,
)
from pintfinder.services.discovery import UNNAMED_VENUE, VenueDiscoverer, classify, name_suggests_pub
from pintfinder.services.osm import DRINKING_AMENITIES, OverpassVenueSource
from pintfinder.utils.cache import LRUCache

ORIGIN = Coordinates(lat=0.0, lon=0.0)


class TestClassify:
    """Tests for the inclusion/confidence rules."""

    @pytest.mark.parametrize("amenity", ["pub", "bar", "biergarten", "social_club"])
    def test_drinking_tags_are_high_confidence(self, amenity: str) -> None:
        assert classify(amenity, "X") is Confidence.HIGH

    def test_bar_included_regardless_of_name(self) -> None:
        assert classify("bar", "X") is Confidence.HIGH
        assert classify("bar", None) is Confidence.HIGH

    def test_restaurant_with_keyword_is_medium(self) -> None:
        assert classify("restaurant", "Smith Arms Restaurant") is Confidence.MEDIUM

    def test_restaurant_without_keyword_is_excluded(self) -> None:
        assert classify("restaurant", "The Red Lion Restaurant") is None

    def test_restaurant_without_name_is_excluded(self) -> None:
        assert classify("restaurant", None) is None

    def test_other_amenities_are_excluded(self) -> None:
        assert classify("cafe", "The Coffee Bar") is None
        assert classify(None, "The Crown Inn") is None

    def test_keyword_match_is_case_insensitive(self) -> None:
        assert name_suggests_pub("THE KING'S ARMS")
        assert name_suggests_pub("Riverside Beer Garden")
        assert name_suggests_pub("Royal British Legion")

    def test_keywords_match_whole_words_only(self) -> None:
        assert not name_suggests_pub("Barnaby's Diner")
        assert not name_suggests_pub("Dinner Club")
        assert not name_suggests_pub("Farmstead Kitchen")


class TestVenueDiscoverer:
    """Tests for discover()."""

    @pytest.mark.asyncio
    async def test_results_sorted_nearest_first(self, source) -> None:
        discoverer = VenueDiscoverer(source, radius_m=3000)
        ranked = await discoverer.discover(ORIGIN, generation=4)

        distances = [v.distance_km for v in ranked]
        assert distances == sorted(distances)
        assert distances == pytest.approx([0.3, 0.5, 1.2])
        assert ranked.generation == 4
        assert ranked.origin == ORIGIN

    @pytest.mark.asyncio
    async def test_initial_estimates(self, source) -> None:
        ranked = await VenueDiscoverer(source).discover(ORIGIN)
        nearest = ranked[0]
        assert nearest.name == "The Near Inn"
        assert nearest.quality is DistanceQuality.ESTIMATE
        assert nearest.walking_time_min == pytest.approx(300 / 80)
        assert nearest.needs_refinement is True
        assert ranked.is_fresh

    @pytest.mark.asyncio
    async def test_queries_source_with_radius_and_categories(self, source) -> None:
        await VenueDiscoverer(source, radius_m=3000).discover(ORIGIN)
        origin, radius, categories = source.calls[0]
        assert origin == ORIGIN
        assert radius == 3000
        assert categories == DRINKING_AMENITIES

    @pytest.mark.asyncio
    async def test_explicit_radius_overrides_default(self, source) -> None:
        await VenueDiscoverer(source, radius_m=3000).discover(ORIGIN, radius_m=500)
        assert source.calls[0][1] == 500

    @pytest.mark.asyncio
    async def test_unnamed_venue_fallback(self, source_factory, place_factory) -> None:
        source = source_factory(places=[place_factory(0.2, amenity="pub", name=None)])
        ranked = await VenueDiscoverer(source).discover(ORIGIN)
        assert ranked[0].name == UNNAMED_VENUE

    @pytest.mark.asyncio
    async def test_classification_applied(self, source_factory, place_factory) -> None:
        source = source_factory(places=[
            place_factory(0.1, amenity="restaurant", name="The Red Lion Restaurant", osm_id=1),
            place_factory(0.2, amenity="restaurant", name="Smith Arms Restaurant", osm_id=2),
            place_factory(0.3, amenity="bar", name="X", osm_id=3),
            place_factory(0.4, amenity="cafe", name="Bean There", osm_id=4),
        ])
        ranked = await VenueDiscoverer(source).discover(ORIGIN)

        assert [v.name for v in ranked] == ["Smith Arms Restaurant", "X"]
        assert ranked[0].confidence is Confidence.MEDIUM
        assert ranked[0].category == "restaurant"
        assert ranked[1].confidence is Confidence.HIGH

    @pytest.mark.asyncio
    async def test_duplicate_coordinates_collapsed(self, source_factory, place_factory) -> None:
        source = source_factory(places=[
            place_factory(0.2, name="The Crown", osm_id=1),
            place_factory(0.2, name="The Crown", osm_id=2, osm_type="way"),
        ])
        ranked = await VenueDiscoverer(source).discover(ORIGIN)
        assert len(ranked) == 1

    @pytest.mark.asyncio
    async def test_duplicate_keeps_tagged_pub_over_restaurant(self, source_factory, place_factory) -> None:
        source = source_factory(places=[
            place_factory(0.2, amenity="restaurant", name="Kings Arms Kitchen", osm_id=1),
            place_factory(0.2, amenity="pub", name="Kings Arms", osm_id=2, osm_type="way"),
            place_factory(0.2, amenity="restaurant", name="Kings Arms Dining", osm_id=3),
        ])
        ranked = await VenueDiscoverer(source).discover(ORIGIN)

        assert len(ranked) == 1
        assert ranked[0].name == "Kings Arms"
        assert ranked[0].confidence is Confidence.HIGH
        assert ranked[0].category == "pub"

    @pytest.mark.asyncio
    async def test_no_venues_after_filtering(self, source_factory, place_factory) -> None:
        source = source_factory(places=[place_factory(0.1, amenity="restaurant", name="Pizza Palace")])
        with pytest.raises(NoVenuesFoundError):
            await VenueDiscoverer(source).discover(ORIGIN)

    @pytest.mark.asyncio
    async def test_empty_source(self, source_factory) -> None:
        with pytest.raises(NoVenuesFoundError):
            await VenueDiscoverer(source_factory()).discover(ORIGIN)

    @pytest.mark.asyncio
    async def test_source_failure_propagates(self, source_factory) -> None:
        source = source_factory(error=DiscoveryError("down"))
        with pytest.raises(DiscoveryError):
            await VenueDiscoverer(source).discover(ORIGIN)


def overpass_payload() -> dict:
    return {
        "elements": [
            {"type": "node", "id": 1, "lat": 51.501, "lon": -0.12, "tags": {"amenity": "pub", "name": "The Crown"}},
            {"type": "way", "id": 2, "center": {"lat": 51.502, "lon": -0.121}, "tags": {"amenity": "bar"}},
            {"type": "way", "id": 3, "tags": {"amenity": "pub", "name": "No Center"}},
            {"type": "node", "id": 4, "lat": 51.503, "lon": -0.122},
        ]
    }


class TestOverpassVenueSource:
    """Tests for the Overpass client."""

    def setup_method(self) -> None:
        self.requests: list[httpx.Request] = []

    def _source(self, handler) -> OverpassVenueSource:
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return OverpassVenueSource(
            url="https://overpass.test/api/interpreter",
            cache=LRUCache(),
            transport=httpx.MockTransport(recording),
        )

    @pytest.mark.asyncio
    async def test_parses_nodes_and_way_centers(self) -> None:
        source = self._source(lambda request: httpx.Response(200, json=overpass_payload()))
        places = await source.query(Coordinates(lat=51.5, lon=-0.12), 3000, ["pub", "bar"])
        await source.close()

        assert [p.osm_id for p in places] == ["1", "2", "4"]
        assert places[0].name == "The Crown"
        assert places[0].amenity == "pub"
        assert (places[1].lat, places[1].lon) == (51.502, -0.121)
        assert places[1].name is None
        assert places[2].tags == {}

    @pytest.mark.asyncio
    async def test_query_uses_around_filter(self) -> None:
        source = self._source(lambda request: httpx.Response(200, json={"elements": []}))
        await source.query(Coordinates(lat=51.5, lon=-0.12), 3000, ["pub", "biergarten"])
        await source.close()

        body = self.requests[0].content.decode()
        assert self.requests[0].method == "POST"
        assert "around%3A3000%2C51.5%2C-0.12" in body
        assert "biergarten" in body

    @pytest.mark.asyncio
    async def test_bad_status_raises_discovery_error(self) -> None:
        source = self._source(lambda request: httpx.Response(504, text="Gateway Timeout"))
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

    @pytest.mark.asyncio
    async def test_unreachable_raises_discovery_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        source = self._source(refuse)
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

    @pytest.mark.asyncio
    async def test_unreadable_body_raises_discovery_error(self) -> None:
        source = self._source(lambda request: httpx.Response(200, text="<html>busy</html>"))
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

    @pytest.mark.asyncio
    async def test_repeat_query_served_from_cache(self) -> None:
        source = self._source(lambda request: httpx.Response(200, json=overpass_payload()))
        first = await source.query(ORIGIN, 3000, ["pub"])
        second = await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

        assert len(self.requests) == 1
        assert [p.osm_id for p in first] == [p.osm_id for p in second]

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self) -> None:
        responses = iter([httpx.Response(500), httpx.Response(200, json=overpass_payload())])
        source = self._source(lambda request: next(responses))
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        places = await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

        assert len(places) == 3
        assert len(self.requests) == 2

    @pytest.mark.asyncio
    async def test_runtime_error_remark_is_not_cached(self) -> None:
        timed_out = {"elements": [], "remark": "runtime error: Query timed out in \"query\" at line 3 after 26 seconds."}
        responses = iter([
            httpx.Response(200, json=timed_out),
            httpx.Response(200, json=overpass_payload()),
        ])
        source = self._source(lambda request: next(responses))
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        places = await source.query(ORIGIN, 3000, ["pub"])
        await source.close()

        assert len(places) == 3
        assert len(self.requests) == 2

    @pytest.mark.asyncio
    async def test_non_object_body_raises_discovery_error(self) -> None:
        source = self._source(lambda request: httpx.Response(200, json=[]))
        with pytest.raises(DiscoveryError):
            await source.query(ORIGIN, 3000, ["pub"])
        await source.close()
