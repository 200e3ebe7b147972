"""Tests for the ranker module."""

import unittest

from prayerclock.ranker import base_priority, rank_candidates


def hit(name, type_="city", class_="place", importance=0.5, lat="1.0", lon="2.0", **address):
    return {
        "name": name,
        "type": type_,
        "class": class_,
        "importance": importance,
        "lat": lat,
        "lon": lon,
        "display_name": f"{name}, Somewhere",
        "address": address,
    }


class TestBasePriority(unittest.TestCase):
    def test_tiers(self):
        self.assertEqual(base_priority("city", "boundary"), 100)
        self.assertEqual(base_priority("municipality", "boundary"), 100)
        self.assertEqual(base_priority("isolated_dwelling", "place"), 50)
        self.assertEqual(base_priority("administrative", "boundary"), 30)
        self.assertEqual(base_priority("neighbourhood", "landuse"), 20)
        self.assertEqual(base_priority("peak", "natural"), 10)

    def test_city_type_beats_place_class(self):
        self.assertEqual(base_priority("town", "place"), 100)


class TestRankCandidates(unittest.TestCase):
    def test_sorted_by_priority_plus_importance(self):
        hits = [
            hit("Suburbia", type_="suburb", class_="boundary", importance=0.9),
            hit("Bigtown", type_="town", importance=0.4),
            hit("Capital", type_="city", importance=0.8),
        ]
        ranked = rank_candidates(hits)
        self.assertEqual([c.name for c in ranked], ["Capital", "Bigtown", "Suburbia"])
        self.assertAlmostEqual(ranked[0].priority, 108.0)
        self.assertAlmostEqual(ranked[2].priority, 39.0)

    def test_excludes_blocklisted_types_and_low_importance(self):
        hits = [
            hit("Main Street", type_="street", class_="highway"),
            hit("Town Hall", type_="building", class_="amenity"),
            hit("Obscure", type_="hamlet", importance=0.05),
            hit("Keep", type_="village", importance=0.2),
        ]
        self.assertEqual([c.name for c in rank_candidates(hits)], ["Keep"])

    def test_excludes_invalid_coordinates(self):
        hits = [
            hit("NoLat", lat=None),
            hit("Garbage", lon="east"),
            hit("Inf", lat="inf"),
            hit("Good"),
        ]
        self.assertEqual([c.name for c in rank_candidates(hits)], ["Good"])

    def test_truncates_to_eight(self):
        hits = [hit(f"City{i}", importance=0.1 + i / 100) for i in range(15)]
        ranked = rank_candidates(hits)
        self.assertEqual(len(ranked), 8)
        self.assertEqual(ranked[0].name, "City14")

    def test_fallback_keeps_anything_with_coordinates(self):
        hits = [
            hit("Road A", type_="road", class_="highway", importance=0.9),
            hit("Nowhere", lat="x"),
            hit("Lowly", type_="hamlet", importance=0.01),
        ]
        ranked = rank_candidates(hits)
        self.assertEqual([c.name for c in ranked], ["Road A", "Lowly"])
        self.assertEqual(ranked[0].priority, 0.0)

    def test_empty_input(self):
        self.assertEqual(rank_candidates([]), [])

    def test_candidate_fields(self):
        ranked = rank_candidates([hit("Bogor", lat="-6.59", lon="106.79", country="Indonesia", state="West Java")])
        c = ranked[0]
        self.assertAlmostEqual(c.latitude, -6.59)
        self.assertAlmostEqual(c.longitude, 106.79)
        self.assertEqual(c.subtitle, "West Java, Indonesia")

    def test_region_falls_back_to_county(self):
        c = rank_candidates([hit("X", county="Kent")])[0]
        self.assertEqual(c.region, "Kent")
        self.assertEqual(rank_candidates([hit("Y")])[0].subtitle, "Location")

    def test_ranking_twice_is_stable(self):
        hits = [
            hit("A", type_="suburb", class_="boundary", importance=0.7),
            hit("B", type_="city", importance=0.35),
            hit("C", type_="city", importance=0.35),
            hit("D", type_="locality", class_="boundary", importance=0.2),
            hit("E", type_="peak", class_="natural", importance=0.6),
        ]
        first = rank_candidates(hits)
        second = rank_candidates([c.as_hit() for c in first])
        self.assertEqual([c.name for c in second], [c.name for c in first])
        self.assertEqual(len(second), len(first))

    def test_fallback_ranking_twice_is_stable(self):
        hits = [hit("Road", type_="road", importance=0.9), hit("Tiny", importance=0.0)]
        first = rank_candidates(hits)
        second = rank_candidates([c.as_hit() for c in first])
        self.assertEqual([c.name for c in second], [c.name for c in first])


if __name__ == "__main__":
    unittest.main()
