from __future__ import annotations

import unittest

from jsonconfig import ErrorKind, OperationResult


class OperationResultTestCase(unittest.TestCase):
    def test_success_carries_data_only(self) -> None:
        result = OperationResult.ok({"a": 1})
        self.assertTrue(result.is_success())
        self.assertEqual(result.data, {"a": 1})
        self.assertIsNone(result.message)
        self.assertIs(result.error, ErrorKind.NONE)
        self.assertEqual(str(result), "Success: {'a': 1}")

    def test_failure_carries_message_and_kind(self) -> None:
        result = OperationResult.failure("disk full", ErrorKind.IO_ERROR)
        self.assertFalse(result.is_success())
        self.assertIsNone(result.data)
        self.assertEqual(result.message, "disk full")
        self.assertEqual(str(result), "Failure: disk full (Error: IO_ERROR)")

    def test_failure_needs_a_kind(self) -> None:
        with self.assertRaises(ValueError):
            OperationResult.failure("oops", ErrorKind.NONE)

    def test_no_implicit_truth_value(self) -> None:
        with self.assertRaises(TypeError):
            bool(OperationResult.ok(1))

    def test_results_are_immutable(self) -> None:
        result = OperationResult.ok(1)
        with self.assertRaises(AttributeError):
            result.success = False  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
