import unittest
from pathlib import Path

from collisions import web_app

HERE = Path(__file__).parent.parent
SAMPLE = HERE / "data" / "sample_collisions.csv"


class TestWebApp(unittest.TestCase):
    def setUp(self):
        web_app.app.config["TESTING"] = True
        web_app.load_initial_data(str(SAMPLE))
        self.client = web_app.app.test_client()

    def tearDown(self):
        web_app.loaded_data = None
        web_app.app.config["MAX_RESULTS"] = web_app.MAX_RESULTS

    def test_data_filters(self):
        resp = self.client.get("/data?borough=BROOKLYN&year=2022")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.get_json()), 3)

    def test_data_is_capped(self):
        web_app.app.config["MAX_RESULTS"] = 2
        self.assertEqual(len(self.client.get("/data").get_json()), 2)

    def test_search(self):
        resp = self.client.get("/search", query_string={"q": "Brooklyn 2022 pedestrian crashes"})
        rows = resp.get_json()
        self.assertEqual([r["COLLISION_ID"] for r in rows], ["1001"])

    def test_empty_search_returns_everything(self):
        self.assertEqual(len(self.client.get("/search?q=").get_json()), 9)

    def test_parse(self):
        resp = self.client.get("/parse", query_string={"q": "staten island 2021"})
        self.assertEqual(resp.get_json(), {"borough": "STATEN ISLAND", "year": "2021"})

    def test_filters(self):
        options = self.client.get("/filters").get_json()
        self.assertEqual(options["years"], ["2022", "2021", "2020"])

    def test_chart(self):
        resp = self.client.get("/charts/borough_counts?year=2022")
        self.assertEqual(resp.get_json(), {
            "labels": ["MANHATTAN", "BROOKLYN", "BRONX", "STATEN ISLAND"],
            "values": [1, 3, 1, 1],
        })

    def test_hourly_chart(self):
        values = self.client.get("/charts/hourly_trend").get_json()["values"]
        self.assertEqual(len(values), 24)
        self.assertEqual(sum(values), 9)

    def test_unknown_chart(self):
        resp = self.client.get("/charts/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("borough_counts", resp.get_json()["charts"])

    def test_no_data(self):
        web_app.loaded_data = None
        self.assertEqual(self.client.get("/data").status_code, 503)
        self.assertEqual(self.client.get("/charts/borough_counts").status_code, 503)

    def test_missing_file_leaves_no_data(self):
        web_app.load_initial_data(str(HERE / "data" / "missing.csv"))
        self.assertIsNone(web_app.loaded_data)


if __name__ == "__main__":
    unittest.main()
