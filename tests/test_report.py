# tests/test_report.py

import os
import tempfile
import unittest

from checks import report

RESULT = {
    "URL": "https://example.com",
    "DOMAIN": "example.com",
    "SCORE": 0.68,
    "ACHIEVED_SCORE": 34,
    "MAXIMUM_SCORE": 50,
    "MESSAGES": ["Framing is restricted (DENY)."],
    "BADGES": [
        {"code": "HTTP_SECURE", "title": "Secure Protocol", "description": "..."},
        {"code": "CLICKJACKING_PROTECT", "title": "Clickjacking Protection", "description": "..."},
    ],
    "SCORE_BREAKDOWN": [
        {"check": "protocol", "score": 5, "max": 5, "passed": True, "message": "Served over HTTPS."},
        {"check": "x_frame_options", "score": 5, "max": 5, "passed": True, "message": "a|b"},
    ],
    "CERTIFICATE": {"issuer": "Example CA", "common_name": "example.com", "not_after": "2025-01-30", "error": None},
    "SERVER": None,
    "INCIDENTS": [],
    "XSS_REPORT_URL": None,
    "HTTP_VERSION": "HTTP/2.0",
    "TLS_VERSION": "TLSv1.2",
}


class TestReport(unittest.TestCase):

    def test_flatten_drops_nested_fields(self):
        row = report._flatten_results([RESULT])[0]
        self.assertNotIn("SCORE_BREAKDOWN", row)
        self.assertNotIn("INCIDENTS", row)
        self.assertEqual(row["BADGES"], "HTTP_SECURE, CLICKJACKING_PROTECT")
        self.assertEqual(row["CERTIFICATE"], str(RESULT["CERTIFICATE"]))
        self.assertEqual(row["SCORE"], 0.68)

    def test_score_level(self):
        self.assertEqual(report.score_level(0.9), "good")
        self.assertEqual(report.score_level(0.68), "warning")
        self.assertEqual(report.score_level(0.2), "bad")
        self.assertEqual(report.score_level(None), "info")

    def test_markdown(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "output.md")
            report.write_to_markdown([RESULT], file_name=path)
            with open(path, encoding="utf-8") as f:
                text = f.read()
        self.assertIn("## https://example.com", text)
        self.assertIn("0.68 (34/50)", text)
        self.assertIn("| x_frame_options | 5/5 | a\\|b |", text)
        self.assertIn("**HTTP_SECURE**", text)

    def test_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "output.csv")
            report.write_to_csv([RESULT], file_name=path)
            with open(path, encoding="utf-8") as f:
                header = f.readline().strip().split(",")
        self.assertIn("URL", header)
        self.assertIn("BADGES", header)


if __name__ == "__main__":
    unittest.main()
