import unittest

import pandas as pd

from collisions import crashes_dictionaries as cd


class TestGetValue(unittest.TestCase):
    def test_canonical_and_legacy_names(self):
        self.assertEqual(cd.get_value({"CRASH_TIME": "14:30"}, "crash_time"), "14:30")
        self.assertEqual(cd.get_value({"CRASH TIME": "14:30"}, "crash_time"), "14:30")
        self.assertEqual(cd.get_value({"crashTime": "14:30"}, "crash_time"), "14:30")

    def test_first_non_empty_alias_wins(self):
        row = {"BOROUGH": "", "Borough": "QUEENS", "borough": "BRONX"}
        self.assertEqual(cd.get_value(row, "borough"), "QUEENS")

    def test_case_and_separator_insensitive_fallback(self):
        self.assertEqual(cd.get_value({"Crash-Time": "7:15"}, "crash_time"), "7:15")
        self.assertEqual(cd.get_value({"number of persons injured": 3}, "persons_injured"), 3)

    def test_absent(self):
        self.assertIsNone(cd.get_value({}, "borough"))
        self.assertIsNone(cd.get_value({"BOROUGH": None}, "borough"))
        self.assertIsNone(cd.get_value({"BOROUGH": float("nan")}, "borough"))
        self.assertIsNone(cd.get_value("not a row", "borough"))

    def test_pandas_missing_markers(self):
        for marker in (pd.NA, pd.NaT, float("nan")):
            self.assertTrue(cd.is_missing(marker), marker)
            self.assertIsNone(cd.get_value({"BOROUGH": marker}, "borough"))
        self.assertFalse(cd.is_missing(0))
        self.assertFalse(cd.is_missing(["QUEENS"]))


class TestCoercion(unittest.TestCase):
    def test_to_int(self):
        self.assertEqual(cd.to_int("2"), 2)
        self.assertEqual(cd.to_int("2.0"), 2)
        self.assertEqual(cd.to_int(None), 0)
        self.assertEqual(cd.to_int(""), 0)
        self.assertEqual(cd.to_int("n/a"), 0)
        self.assertEqual(cd.to_int(-3), 0)

    def test_to_float(self):
        self.assertEqual(cd.to_float("40.7128"), 40.7128)
        self.assertIsNone(cd.to_float(""))
        self.assertIsNone(cd.to_float("north"))
        self.assertIsNone(cd.to_float(float("nan")))

    def test_labels_are_trimmed_and_upper_cased(self):
        self.assertEqual(cd.get_borough({"Borough": "  Brooklyn "}), "BROOKLYN")
        self.assertIsNone(cd.get_borough({"Borough": "   "}))

    def test_counts(self):
        row = {"NUMBER OF PERSONS INJURED": "2", "fatalities": 1}
        self.assertEqual(cd.get_counts(row), (2, 1))
        self.assertEqual(cd.get_counts({}), (0, 0))

    def test_missing_columns(self):
        missing = cd.missing_columns(["CRASH DATE", "CRASH TIME", "BOROUGH", "LATITUDE", "LONGITUDE"])
        self.assertEqual(
            missing,
            ["vehicle_type", "contributing_factor", "persons_injured", "persons_killed"],
        )


if __name__ == "__main__":
    unittest.main()
