import unittest

from fakes import StubGeocoder, StubRouter, found_coords, found_route

from georoute import engine as engine_mod
from georoute.cache import InMemoryCoordinateCache, InMemoryRouteCache, route_key
from georoute.config import Settings
from georoute.domain import Coordinates, ProviderResult, RouteSource
from georoute.engine import RoutingEngine
from georoute.geometry import haversine_km
from georoute.overrides import CoordinateOverrides

MUNICH = (48.137, 11.575)
BERLIN = (52.52, 13.405)
BY_POSTAL_CODE = {"80331": MUNICH, "10115": BERLIN}


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def _lookup(address):
    for postal_code, coords in BY_POSTAL_CODE.items():
        if postal_code in address:
            return found_coords(*coords)
    return ProviderResult.miss()


def _make_engine(geocoders, routers, clock=None, sleeps=None, **settings_overrides):
    settings = Settings(**settings_overrides)
    route_cache = InMemoryRouteCache(ttl_seconds=settings.route_cache_ttl_seconds, clock=clock or FakeClock())
    return RoutingEngine(
        geocoders,
        routers,
        coordinate_cache=InMemoryCoordinateCache(),
        route_cache=route_cache,
        overrides=CoordinateOverrides({"97828": (49.85, 9.6), "marktheidenfeld": (49.85, 9.6)}),
        settings=settings,
        sleep=(sleeps.append if sleeps is not None else lambda _s: None),
    )


class TestConstruction(unittest.TestCase):
    def test_keeps_injected_empty_caches(self):
        coordinate_cache = InMemoryCoordinateCache()
        route_cache = InMemoryRouteCache(clock=FakeClock())
        engine = RoutingEngine([], [], coordinate_cache=coordinate_cache, route_cache=route_cache, settings=Settings())
        self.assertIs(engine.coordinate_cache, coordinate_cache)
        self.assertIs(engine.route_cache, route_cache)


class TestGeocode(unittest.TestCase):
    def setUp(self):
        self.calls = []
        self.google = StubGeocoder("google", "commercial", _lookup, self.calls)
        self.nominatim = StubGeocoder("nominatim", "community", _lookup, self.calls)
        self.engine = _make_engine([self.google, self.nominatim], [])

    def test_repeat_lookup_hits_provider_once(self):
        first = self.engine.geocode("10115 Berlin")
        second = self.engine.geocode("10115 Berlin")
        self.assertEqual(first, second)
        self.assertEqual(first.coordinates, Coordinates(*BERLIN))
        self.assertEqual(self.calls, ["google"])

    def test_falls_back_to_community_geocoder(self):
        self.google.result = ProviderResult.error("quota exceeded")
        result = self.engine.geocode("80331 München")
        self.assertTrue(result.success)
        self.assertEqual(self.calls, ["google", "nominatim"])

    def test_cache_slots_are_per_provider(self):
        self.google.result = ProviderResult.unavailable()
        self.engine.geocode("80331")
        self.assertIsNone(self.engine.coordinate_cache.get("commercial-80331"))
        self.assertEqual(self.engine.coordinate_cache.get("community-80331"), Coordinates(*MUNICH))

    def test_override_skips_providers(self):
        for address in ("97828", "Hauptstraße 5, 97828 Marktheidenfeld", "MARKTHEIDENFELD"):
            result = self.engine.geocode(address)
            self.assertEqual(result.coordinates, Coordinates(49.85, 9.6))
        self.assertEqual(self.calls, [])

    def test_total_failure_reports_not_found(self):
        result = self.engine.geocode("Atlantis")
        self.assertFalse(result.success)
        self.assertIsNone(result.coordinates)
        self.assertEqual(result.error, "address not found")
        self.assertEqual(self.calls, ["google", "nominatim"])

    def test_failures_are_not_cached(self):
        self.engine.geocode("Atlantis")
        self.engine.geocode("Atlantis")
        self.assertEqual(self.calls, ["google", "nominatim", "google", "nominatim"])


class TestBatchGeocode(unittest.TestCase):
    def test_pauses_between_calls(self):
        sleeps = []
        geocoder = StubGeocoder("google", "commercial", _lookup)
        engine = _make_engine([geocoder], [], sleeps=sleeps, batch_delay_seconds=0.1)
        results = engine.batch_geocode(["80331", "10115", "80331"])
        self.assertEqual(len(results), 3)
        self.assertTrue(all(r.success for r in results))
        self.assertEqual(sleeps, [0.1, 0.1])
        # third address is a cache hit but still waits its turn
        self.assertEqual(geocoder.calls, ["80331", "10115"])

    def test_preserves_order_and_failures(self):
        engine = _make_engine([StubGeocoder("google", "commercial", _lookup)], [])
        results = engine.batch_geocode(["10115", "nowhere", "80331"])
        self.assertEqual([r.success for r in results], [True, False, True])
        self.assertEqual(results[0].coordinates, Coordinates(*BERLIN))

    def test_empty_batch(self):
        sleeps = []
        engine = _make_engine([], [], sleeps=sleeps)
        self.assertEqual(engine.batch_geocode([]), [])
        self.assertEqual(sleeps, [])


class TestGeocodeStructured(unittest.TestCase):
    def test_widens_query_until_result_is_in_germany(self):
        def lookup(address):
            if address.startswith("Hauptstr. 1"):
                return found_coords(40.7, -74.0)
            return _lookup(address)

        geocoder = StubGeocoder("google", "commercial", lookup)
        engine = _make_engine([geocoder], [])
        result = engine.geocode_structured("Hauptstr. 1", "80331", "München")
        self.assertEqual(result.coordinates, Coordinates(*MUNICH))
        self.assertEqual(
            geocoder.calls,
            [
                "Hauptstr. 1, 80331 München",
                "Hauptstr. 1, 80331",
                "80331 München",
            ],
        )

    def test_duplicate_queries_are_skipped(self):
        geocoder = StubGeocoder("google", "commercial", ProviderResult.miss())
        engine = _make_engine([geocoder], [])
        result = engine.geocode_structured(postal_code="12345")
        self.assertFalse(result.success)
        self.assertEqual(geocoder.calls, ["12345"])


class TestCalculateRoute(unittest.TestCase):
    def setUp(self):
        self.calls = []
        self.clock = FakeClock()
        self.geocoder = StubGeocoder("google", "commercial", _lookup, self.calls)
        self.google = StubRouter("google-routes", found_route(584, 360, 330), self.calls)
        self.ors = StubRouter(
            "openrouteservice", found_route(585, 330, source=RouteSource.OPENROUTESERVICE), self.calls
        )
        self.engine = _make_engine([self.geocoder], [self.google, self.ors], clock=self.clock)

    def test_uses_traffic_aware_router_first(self):
        route = self.engine.calculate_route("80331", "10115")
        self.assertEqual(route.source, RouteSource.GOOGLE)
        self.assertEqual(route.traffic_delay_minutes, 30)
        self.assertEqual(self.ors.calls, [])

    def test_falls_back_to_open_router(self):
        self.google.result = ProviderResult.error("HTTP 500")
        route = self.engine.calculate_route("80331", "10115")
        self.assertEqual(route.source, RouteSource.OPENROUTESERVICE)
        self.assertEqual(route.traffic_delay_minutes, 0)
        self.assertEqual(self.calls, ["google", "google", "google-routes", "openrouteservice"])

    def test_great_circle_when_no_router_answers(self):
        self.google.result = ProviderResult.unavailable()
        self.ors.result = ProviderResult.error("timeout")
        route = self.engine.calculate_route("80331", "10115")
        expected = haversine_km(Coordinates(*MUNICH), Coordinates(*BERLIN)) * 1.3
        self.assertAlmostEqual(route.distance_km, expected, delta=0.01)
        self.assertAlmostEqual(route.travel_time_minutes, expected, delta=0.01)
        self.assertEqual(route.traffic_delay_minutes, 0)
        self.assertEqual(route.source, RouteSource.GREAT_CIRCLE)
        self.assertIsNotNone(self.engine.route_cache.get(route_key("80331", "10115")))

    def test_postal_zone_estimate_when_geocoding_fails(self):
        self.geocoder.result = ProviderResult.miss()
        route = self.engine.calculate_route("80331", "10115")
        self.assertEqual(route.source, RouteSource.POSTAL_ZONE)
        self.assertEqual(route.distance_km, 3500)
        self.assertGreaterEqual(route.distance_km, 20)
        self.assertEqual(route.traffic_delay_minutes, 0)
        self.assertEqual(self.google.calls, [])
        self.assertIsNone(self.engine.route_cache.get(route_key("80331", "10115")))

    def test_postal_zone_estimate_is_recomputed(self):
        self.geocoder.result = ProviderResult.miss()
        self.engine.calculate_route("80331", "10115")
        self.engine.calculate_route("80331", "10115")
        self.assertEqual(len(self.geocoder.calls), 4)

    def test_postal_zone_floor(self):
        self.geocoder.result = ProviderResult.miss()
        self.assertEqual(self.engine.calculate_route("80331", "80999").distance_km, 20)

    def test_route_cache_expires_after_ttl(self):
        self.engine.calculate_route("80331", "10115")
        self.clock.now += 299.999
        self.engine.calculate_route("80331", "10115")
        self.assertEqual(len(self.google.calls), 1)
        self.clock.now += 0.002
        self.engine.calculate_route("80331", "10115")
        self.assertEqual(len(self.google.calls), 2)

    def test_route_cache_key_is_ordered(self):
        self.engine.calculate_route("80331", "10115")
        self.engine.calculate_route("10115", "80331")
        self.assertEqual(len(self.google.calls), 2)

    def test_delay_never_negative_on_every_path(self):
        scenarios = [
            (found_route(584, 360, 330), found_route(585, 330, source=RouteSource.OPENROUTESERVICE), _lookup),
            (found_route(10, 5, 9), ProviderResult.miss(), _lookup),
            (ProviderResult.error("x"), ProviderResult.error("y"), _lookup),
            (ProviderResult.error("x"), ProviderResult.error("y"), lambda _a: ProviderResult.miss()),
        ]
        for google, ors, lookup in scenarios:
            self.google.result, self.ors.result, self.geocoder.result = google, ors, lookup
            self.engine.clear_caches()
            route = self.engine.calculate_route("80331", "10115")
            self.assertGreaterEqual(route.distance_km, 0)
            self.assertGreaterEqual(route.travel_time_minutes_no_traffic, 0)
            self.assertGreaterEqual(route.traffic_delay_minutes, 0)
            self.assertAlmostEqual(
                route.traffic_delay_minutes,
                max(0, route.travel_time_minutes - route.travel_time_minutes_no_traffic),
            )

    def test_clear_caches_forces_new_lookups(self):
        self.engine.calculate_route("80331", "10115")
        self.engine.clear_caches()
        self.engine.calculate_route("80331", "10115")
        self.assertEqual(len(self.google.calls), 2)
        self.assertEqual(self.geocoder.calls, ["80331", "10115", "80331", "10115"])


class TestModuleFacade(unittest.TestCase):
    def tearDown(self):
        engine_mod.use_engine_for_tests(None)

    def test_functions_delegate_to_installed_engine(self):
        stub = _make_engine(
            [StubGeocoder("google", "commercial", _lookup)],
            [StubRouter("google-routes", found_route(584, 360, 330))],
        )
        engine_mod.use_engine_for_tests(stub)
        self.assertIs(engine_mod.get_engine(), stub)
        self.assertTrue(engine_mod.geocode("10115").success)
        self.assertEqual(len(engine_mod.batch_geocode(["10115", "80331"])), 2)
        self.assertEqual(engine_mod.calculate_route("80331", "10115").distance_km, 584)


if __name__ == "__main__":
    unittest.main()
