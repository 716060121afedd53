import tempfile
import textwrap
import unittest
from pathlib import Path

from ether_balance_checker.config_loader import ConfigValidationError, load_config

TX = "0x" + "ab" * 32
ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40


class ConfigLoaderTests(unittest.TestCase):
    def _write_config(self, content: str) -> Path:
        tmp = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False)
        tmp.write(textwrap.dedent(content))
        tmp.flush()
        tmp.close()
        path = Path(tmp.name)
        self.addCleanup(path.unlink, missing_ok=True)
        return path

    def test_load_valid_config(self) -> None:
        path = self._write_config(
            f"""
            rpc_url: "http://127.0.0.1:8545/"
            include_fee: true
            checks:
              - name: transfer
                transaction: "{TX}"
                accounts: ["{ALICE}", "{BOB}"]
                changes: [-1000000000000000000, "1000000000000000000"]
              - transaction: "{TX}"
                accounts: ["{BOB}"]
                changes: ["0x10"]
                include_fee: false
                negate: true
            """
        )

        config = load_config(path)
        self.assertEqual(config.rpc_url, "http://127.0.0.1:8545")
        self.assertEqual(config.timeout_seconds, 5.0)
        self.assertEqual(len(config.checks), 2)

        first, second = config.checks
        self.assertEqual(first.name, "transfer")
        self.assertEqual(first.changes, [-(10**18), 10**18])
        self.assertTrue(first.include_fee)
        self.assertFalse(first.negate)
        self.assertEqual(second.name, "check_2")
        self.assertEqual(second.changes, [16])
        self.assertFalse(second.include_fee)
        self.assertTrue(second.negate)

    def test_rejects_change_count_mismatch(self) -> None:
        path = self._write_config(
            f"""
            rpc_url: "http://127.0.0.1:8545"
            checks:
              - transaction: "{TX}"
                accounts: ["{ALICE}", "{BOB}"]
                changes: [1]
            """
        )

        with self.assertRaisesRegex(ConfigValidationError, r"checks\[0\]\.changes"):
            load_config(path)

    def test_rejects_invalid_address(self) -> None:
        path = self._write_config(
            f"""
            rpc_url: "http://127.0.0.1:8545"
            checks:
              - transaction: "{TX}"
                accounts: ["0x1234"]
                changes: [1]
            """
        )

        with self.assertRaisesRegex(ConfigValidationError, r"accounts\[0\]"):
            load_config(path)

    def test_rejects_float_change(self) -> None:
        path = self._write_config(
            f"""
            rpc_url: "http://127.0.0.1:8545"
            checks:
              - transaction: "{TX}"
                accounts: ["{ALICE}"]
                changes: [1.5]
            """
        )

        with self.assertRaises(ConfigValidationError):
            load_config(path)

    def test_rejects_missing_checks(self) -> None:
        path = self._write_config(
            """
            rpc_url: "http://127.0.0.1:8545"
            """
        )

        with self.assertRaises(ConfigValidationError):
            load_config(path)

    def test_rejects_duplicate_names(self) -> None:
        path = self._write_config(
            f"""
            rpc_url: "http://127.0.0.1:8545"
            checks:
              - name: same
                transaction: "{TX}"
                accounts: ["{ALICE}"]
                changes: [1]
              - name: same
                transaction: "{TX}"
                accounts: ["{ALICE}"]
                changes: [1]
            """
        )

        with self.assertRaisesRegex(ConfigValidationError, "Duplicate"):
            load_config(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_config("/nonexistent/checks.yaml")


if __name__ == "__main__":
    unittest.main()
