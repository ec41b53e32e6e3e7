import unittest
from datetime import date, datetime, time
from pathlib import Path

import pandas as pd

from collisions.datapull import (
    as_rows,
    filter_options,
    filter_records,
    month_key,
    parse_crash_date,
    parse_crash_hour,
    read_accidents_csv,
)

HERE = Path(__file__).parent.parent
SAMPLE = HERE / "data" / "sample_collisions.csv"


class TestReadCsv(unittest.TestCase):
    def test_read_csv_list(self):
        rows = read_accidents_csv(str(SAMPLE))
        self.assertIsInstance(rows, list)
        self.assertEqual(len(rows), 9)

    def test_blank_cells_become_none(self):
        rows = read_accidents_csv(str(SAMPLE))
        self.assertIsNone(rows[4]["BOROUGH"])
        self.assertIsNone(rows[5]["LATITUDE"])
        self.assertEqual(rows[0]["CRASH TIME"], "14:30")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            read_accidents_csv(str(HERE / "data" / "does_not_exist.csv"))


class TestParsing(unittest.TestCase):
    def test_dates(self):
        self.assertEqual(parse_crash_date("2022-04-10"), date(2022, 4, 10))
        self.assertEqual(parse_crash_date("2021-07-04T00:00:00.000"), date(2021, 7, 4))
        self.assertEqual(parse_crash_date("03/05/2022"), date(2022, 3, 5))
        self.assertEqual(parse_crash_date(datetime(2020, 1, 2, 3, 4)), date(2020, 1, 2))
        self.assertEqual(parse_crash_date(date(2019, 5, 6)), date(2019, 5, 6))

    def test_free_text_dates(self):
        self.assertEqual(parse_crash_date("Mar 5, 2022"), date(2022, 3, 5))
        self.assertEqual(parse_crash_date("March 5 2022 10:15"), date(2022, 3, 5))

    def test_free_text_without_a_day_has_no_date(self):
        self.assertIsNone(parse_crash_date("March 2021"))
        self.assertIsNone(parse_crash_date("2021 March"))

    def test_unparseable_dates_fall_through_to_none(self):
        for value in (None, "", "   ", "not a date", "13/45/2022", float("nan"), 12345):
            self.assertIsNone(parse_crash_date(value), value)

    def test_hours(self):
        self.assertEqual(parse_crash_hour("14:30"), 14)
        self.assertEqual(parse_crash_hour("9:05:00"), 9)
        self.assertEqual(parse_crash_hour("0905"), 9)
        self.assertEqual(parse_crash_hour(1430), 14)
        self.assertEqual(parse_crash_hour(905.0), 9)
        self.assertEqual(parse_crash_hour(0), 0)
        self.assertEqual(parse_crash_hour(time(23, 59)), 23)

    def test_invalid_hours(self):
        for value in (None, "", "25:00", 2500, -100, "noon", True):
            self.assertIsNone(parse_crash_hour(value), value)

    def test_month_key_falls_back_to_year_and_month(self):
        self.assertEqual(month_key({"CRASH_DATE": "03/05/2022"}), "2022-03")
        self.assertEqual(month_key({"CRASH_DATE": "garbage", "YEAR": "2021", "MONTH": "Feb"}), "2021-02")
        self.assertEqual(month_key({"year": 2020, "month": 11}), "2020-11")
        self.assertEqual(month_key({"CRASH_DATE": "March 2021"}), "2021-03")
        self.assertIsNone(month_key({"YEAR": "2020"}))
        self.assertIsNone(month_key({}))


class TestAsRows(unittest.TestCase):
    def test_dataframe_is_converted(self):
        df = pd.DataFrame([{"BOROUGH": "QUEENS"}, {"BOROUGH": "BRONX"}])
        self.assertEqual(as_rows(df), [{"BOROUGH": "QUEENS"}, {"BOROUGH": "BRONX"}])

    def test_generators_are_accepted(self):
        self.assertEqual(len(as_rows({"BOROUGH": b} for b in ("A", "B"))), 2)

    def test_precondition_violations(self):
        for bad in (None, 42, "BROOKLYN", {"BOROUGH": "BROOKLYN"}):
            with self.assertRaises(TypeError):
                as_rows(bad)


class TestFilter(unittest.TestCase):
    def setUp(self):
        self.rows = read_accidents_csv(str(SAMPLE))

    def test_filter_year(self):
        self.assertEqual(len(filter_records(self.rows, year="2022")), 6)

    def test_filter_borough_case_insensitive(self):
        self.assertEqual(len(filter_records(self.rows, borough="brooklyn")), 3)

    def test_combined_filters(self):
        found = filter_records(self.rows, borough="BROOKLYN", year=2022, injury="PEDESTRIAN")
        self.assertEqual([r["COLLISION_ID"] for r in found], ["1001"])

    def test_vehicle_and_factor_substrings(self):
        self.assertEqual(len(filter_records(self.rows, vehicle="taxi")), 2)
        self.assertEqual(len(filter_records(self.rows, vehicle="TRUCK")), 1)
        self.assertEqual(len(filter_records(self.rows, factor="distraction")), 3)

    def test_injury_types(self):
        self.assertEqual(len(filter_records(self.rows, injury="FATAL")), 1)
        self.assertEqual(len(filter_records(self.rows, injury="injured")), 4)

    def test_blank_values_are_no_constraint(self):
        self.assertEqual(len(filter_records(self.rows, borough="", year=None, vehicle="  ")), 9)

    def test_bad_year_matches_nothing(self):
        self.assertEqual(filter_records(self.rows, year="twenty"), [])

    def test_limit(self):
        self.assertEqual(len(filter_records(self.rows, limit=4)), 4)

    def test_rows_are_not_modified(self):
        before = [dict(r) for r in self.rows]
        filter_records(self.rows, borough="QUEENS")
        self.assertEqual(self.rows, before)


class TestFilterOptions(unittest.TestCase):
    def test_options(self):
        options = filter_options(read_accidents_csv(str(SAMPLE)))
        self.assertEqual(options["boroughs"], ["MANHATTAN", "BROOKLYN", "QUEENS", "BRONX", "STATEN ISLAND"])
        self.assertEqual(options["years"], ["2022", "2021", "2020"])
        self.assertEqual(options["vehicle_types"][0], "SEDAN")
        self.assertNotIn("UNSPECIFIED", options["factors"])
        self.assertIn("PEDESTRIAN", options["injury_types"])


if __name__ == "__main__":
    unittest.main()
