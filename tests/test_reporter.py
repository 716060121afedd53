import tempfile
import unittest
from pathlib import Path

from ether_balance_checker.invariant_checker import InvariantResult
from ether_balance_checker.reporter import Reporter
from ether_balance_checker.transactions import MissingReceiptError


class ReporterTests(unittest.TestCase):
    def test_render_indents_multiline_failures(self) -> None:
        reporter = Reporter(use_color=False)
        reporter.add_invariant("transfer", InvariantResult("balance_changes_matched", True, "ok"))
        reporter.add_invariant(
            "refund", InvariantResult("balance_changes_matched", False, "first line\nsecond line")
        )

        lines = reporter.render().splitlines()
        self.assertIn("[PASS] transfer: balance_changes_matched - ok", lines)
        self.assertIn("[FAIL] refund: balance_changes_matched - first line", lines)
        self.assertIn("    second line", lines)
        self.assertEqual(lines[-1], "Summary: passed=1, failed=1, total=2")
        self.assertTrue(reporter.has_failures)

    def test_errors_are_failures(self) -> None:
        reporter = Reporter(use_color=False)
        reporter.add_error("transfer", MissingReceiptError("never mined"))

        self.assertTrue(reporter.has_failures)
        self.assertIn("[FAIL] transfer: MissingReceiptError - never mined", reporter.render())

    def test_written_report_has_no_color_codes(self) -> None:
        reporter = Reporter(use_color=True)
        reporter.add_invariant("transfer", InvariantResult("balance_changes_matched", True, "ok"))

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "report.txt"
            reporter.write(path)
            content = path.read_text(encoding="utf-8")

        self.assertNotIn("\x1b[", content)
        self.assertIn("[PASS] transfer", content)


if __name__ == "__main__":
    unittest.main()
