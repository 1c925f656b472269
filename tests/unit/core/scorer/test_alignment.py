#!/usr/bin/env python3
"""
Test suite for experience, domain and location sub-scores.
"""

import unittest

from core.scorer.alignment import (
    calculate_domain_score,
    calculate_experience_score,
    calculate_location_score,
    has_remote_affinity,
)


class TestExperienceScore(unittest.TestCase):

    def test_minimum_met(self):
        self.assertEqual(calculate_experience_score(7, 5), 100.0)
        self.assertEqual(calculate_experience_score(5, 5), 100.0)

    def test_shortfall_is_proportional(self):
        self.assertAlmostEqual(calculate_experience_score(2, 5), 40.0)

    def test_floored_at_zero(self):
        self.assertEqual(calculate_experience_score(None, 5), 0.0)
        self.assertEqual(calculate_experience_score(-3, 5), 0.0)

    def test_no_minimum(self):
        self.assertEqual(calculate_experience_score(0, None), 100.0)
        self.assertEqual(calculate_experience_score(0, 0), 100.0)


class TestDomainScore(unittest.TestCase):

    def test_case_insensitive_match(self):
        score, matched, missing = calculate_domain_score(["FinTech"], ["fintech"])
        self.assertEqual(score, 100.0)
        self.assertEqual(matched, ["fintech"])
        self.assertEqual(missing, [])

    def test_partial(self):
        score, matched, missing = calculate_domain_score(["SaaS"], ["fintech", "saas"])
        self.assertEqual(score, 50.0)
        self.assertEqual(missing, ["fintech"])

    def test_candidate_without_domains(self):
        score, _, _ = calculate_domain_score([], ["fintech"])
        self.assertEqual(score, 0.0)

    def test_job_without_domains(self):
        score, _, _ = calculate_domain_score(["fintech"], [])
        self.assertEqual(score, 100.0)


class TestLocationScore(unittest.TestCase):

    def test_same_city(self):
        score, _ = calculate_location_score({'city': 'Berlin', 'country': 'DE'}, {'city': 'berlin', 'country': 'DE'})
        self.assertEqual(score, 100.0)

    def test_country_match_when_job_names_no_city(self):
        score, _ = calculate_location_score({'city': 'Munich', 'country': 'DE'}, {'country': 'de'})
        self.assertEqual(score, 100.0)

    def test_same_country_different_city(self):
        score, detail = calculate_location_score({'city': 'Munich', 'country': 'DE'}, {'city': 'Berlin', 'country': 'DE'})
        self.assertEqual(score, 50.0)
        self.assertIn("same country", detail)

    def test_same_country_score_is_configurable(self):
        score, _ = calculate_location_score(
            {'city': 'Munich', 'country': 'DE'}, {'city': 'Berlin', 'country': 'DE'}, same_country_score=25
        )
        self.assertEqual(score, 25.0)

    def test_elsewhere(self):
        score, _ = calculate_location_score({'city': 'Paris', 'country': 'FR'}, {'city': 'Berlin', 'country': 'DE'})
        self.assertEqual(score, 0.0)

    def test_preferred_locations_count(self):
        signals = {'city': 'Paris', 'country': 'FR', 'preferred_cities': ['Berlin']}
        score, _ = calculate_location_score(signals, {'city': 'Berlin', 'country': 'DE'})
        self.assertEqual(score, 100.0)

        signals = {'country': 'US', 'preferred_locations': ['DE', 'UK']}
        score, _ = calculate_location_score(signals, {'country': 'DE'})
        self.assertEqual(score, 100.0)

    def test_remote_job_with_affinity(self):
        score, _ = calculate_location_score(
            {'city': 'Paris', 'remote_affinity': True}, {'city': 'Berlin', 'location_type': 'remote'}
        )
        self.assertEqual(score, 100.0)

    def test_remote_job_without_affinity(self):
        score, _ = calculate_location_score({'city': 'Paris', 'remote_affinity': False}, {'location_type': 'remote'})
        self.assertEqual(score, 0.0)

    def test_no_location_constraint(self):
        score, _ = calculate_location_score({'city': 'Paris'}, {})
        self.assertEqual(score, 100.0)
        score, _ = calculate_location_score(None, None)
        self.assertEqual(score, 100.0)

    def test_remote_affinity_values(self):
        self.assertTrue(has_remote_affinity({'remote_affinity': 'hybrid'}))
        self.assertTrue(has_remote_affinity({'remote': True}))
        self.assertFalse(has_remote_affinity({'remote_affinity': 'onsite'}))
        self.assertFalse(has_remote_affinity({'remote_affinity': ''}))
        self.assertFalse(has_remote_affinity({}))

    def test_empty_collections_are_not_remote_affinity(self):
        for value in ([], {}, (), set()):
            with self.subTest(value=value):
                self.assertFalse(has_remote_affinity({'remote_affinity': value}))
        self.assertTrue(has_remote_affinity({'remote_affinity': ['remote']}))

        score, _ = calculate_location_score({'remote_affinity': []}, {'location_type': 'remote'})
        self.assertEqual(score, 0.0)


if __name__ == '__main__':
    unittest.main()
