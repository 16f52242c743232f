"""Tests for the text report and the run-directory writers."""
import csv
import json
import os
import shutil
import tempfile
import unittest

from stablematch.core.types import PreferenceProfile
from stablematch.evaluation.reports import (
    format_report,
    write_matches_csv,
    write_preferences_json,
    write_summary,
)
from stablematch.market.matcher import deferred_acceptance

SELLERS = [[1, 0], [0, 1]]
BUYERS = [[0, 1], [0, 1]]


class TestFormatReport(unittest.TestCase):

    def setUp(self):
        self.profile = PreferenceProfile(SELLERS, BUYERS)
        self.result = deferred_acceptance(SELLERS, BUYERS)

    def test_contains_tables_and_matches(self):
        text = format_report(self.profile, self.result, elapsed=0.25)
        lines = text.splitlines()
        self.assertIn("Pref lists - sellers", lines)
        self.assertIn("seller 0: 1 0", lines)
        self.assertIn("seller 1: 0 1", lines)
        self.assertIn("Pref lists - buyers", lines)
        self.assertIn("buyer 0: 0 1", lines)
        self.assertIn("seller 0 with buyer 1", lines)
        self.assertIn("seller 1 with buyer 0", lines)
        self.assertIn("Time taken: 0.250 seconds", lines)

    def test_quiet_omits_tables(self):
        text = format_report(self.profile, self.result, show_preferences=False)
        self.assertNotIn("Pref lists", text)
        self.assertNotIn("Time taken", text)
        self.assertIn("seller 1 with buyer 0", text)

    def test_empty_instance(self):
        empty = PreferenceProfile([], [])
        text = format_report(empty, deferred_acceptance([], []))
        self.assertIn("Proposals: 0", text)


class TestWriters(unittest.TestCase):

    def setUp(self):
        self.run_dir = tempfile.mkdtemp(prefix="stablematch_reports_")
        self.profile = PreferenceProfile(SELLERS, BUYERS)
        self.result = deferred_acceptance(SELLERS, BUYERS)

    def tearDown(self):
        shutil.rmtree(self.run_dir, ignore_errors=True)

    def test_summary_json(self):
        path = write_summary({"n": 2, "stable": True}, self.run_dir)
        with open(path) as f:
            self.assertEqual(json.load(f), {"n": 2, "stable": True})

    def test_preferences_json(self):
        path = write_preferences_json(self.profile, self.run_dir, instance=3)
        self.assertTrue(path.endswith("preferences_3.json"))
        with open(path) as f:
            data = json.load(f)
        self.assertEqual(data["seller_prefs"], SELLERS)
        self.assertEqual(data["buyer_prefs"], BUYERS)

    def test_matches_csv_appends_instances(self):
        write_matches_csv(self.profile, self.result, self.run_dir, instance=0)
        path = write_matches_csv(self.profile, self.result, self.run_dir, instance=1)
        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
        self.assertEqual(len(rows), 4)
        self.assertEqual(rows[0], {
            "instance": "0", "seller": "0", "buyer": "1",
            "seller_rank": "0", "buyer_rank": "0",
        })
        self.assertEqual(rows[1]["buyer_rank"], "1")
        self.assertEqual(rows[3]["instance"], "1")
        self.assertTrue(os.path.exists(os.path.join(self.run_dir, "matches.csv")))


if __name__ == "__main__":
    unittest.main()
