"""
Test suite for the receipt batch processor.

Tests cover:
- Normalizing supported JSON layouts
- Per-receipt error handling and statistics
- DataFrame export of results and errors
"""

import json
import unittest

from receipt_batch_processor import (
    InvalidReceiptStructureError,
    ReceiptBatchProcessor,
    load_receipts_from_json,
    normalize_receipts,
)


RESTAURANT_RECEIPT = (
    "Punjabi Tadka Restaurant\nTable 4\nButter Chicken 320.00\n"
    "Garlic Naan 60.00\nLassi 80.00\nSubtotal 460.00\nCGST 11.50\n"
    "SGST 11.50\nGrand Total Rs. 483.00\nThank you for dining"
)


class FailingEngine:
    """Engine stand-in that fails on every receipt."""
    category_names = ["Food"]

    def process(self, text):
        raise RuntimeError("engine unavailable")


class TestNormalizeReceipts(unittest.TestCase):
    """Test JSON layout normalization."""

    def test_object_with_receipts_key(self):
        receipts = normalize_receipts({"receipts": [{"id": "r-1", "text": "a"}, "b"]})
        self.assertEqual(receipts, [
            {"id": "r-1", "text": "a"},
            {"id": "2", "text": "b"},
        ])

    def test_direct_array_assigns_ids(self):
        receipts = normalize_receipts([{"text": "a"}, {"text": "b", "id": 7}])
        self.assertEqual([r["id"] for r in receipts], ["1", "7"])

    def test_unsupported_layouts(self):
        with self.assertRaises(InvalidReceiptStructureError):
            normalize_receipts({"items": []})
        with self.assertRaises(InvalidReceiptStructureError):
            normalize_receipts({"receipts": "not a list"})
        with self.assertRaises(InvalidReceiptStructureError):
            normalize_receipts("text")

    def test_load_from_bytes(self):
        content = json.dumps({"receipts": ["Total 120"]}).encode("utf-8")
        self.assertEqual(load_receipts_from_json(content), [{"id": "1", "text": "Total 120"}])


class TestProcessBatch(unittest.TestCase):
    """Test batch processing and statistics."""

    def setUp(self):
        self.processor = ReceiptBatchProcessor()

    def test_mixed_batch(self):
        receipts = normalize_receipts([
            {"id": "dinner", "text": RESTAURANT_RECEIPT},
            {"id": "note", "text": "lunch"},
            {"id": "missing", "text": None},
            42,
        ])
        batch = self.processor.process_batch(receipts)
        stats = batch.stats

        self.assertEqual(stats.total_receipts, 4)
        self.assertEqual(stats.processed, 4)
        self.assertEqual(stats.successful, 2)
        self.assertEqual(stats.failed, 2)
        self.assertEqual(stats.categorized, 1)
        self.assertEqual(stats.uncategorized, 1)
        self.assertEqual(stats.amounts_found, 1)
        self.assertEqual(stats.by_category, {"Food": 1})
        self.assertEqual(stats.success_rate, 50.0)
        self.assertEqual(batch.error_summary, {"INVALID_TEXT": 2})
        self.assertEqual([e.receipt_id for e in batch.errors], ["missing", "4"])

        first = batch.results[0]
        self.assertEqual(first.receipt_id, "dinner")
        self.assertEqual(first.result.category, "Food")
        self.assertEqual(first.result.amount, 483.0)
        self.assertAlmostEqual(stats.average_amount_confidence, first.result.amount_confidence)

    def test_engine_errors_are_recorded(self):
        processor = ReceiptBatchProcessor(engine=FailingEngine())
        batch = processor.process_batch([{"id": "a", "text": "Total 100"}])
        self.assertEqual(batch.results, [])
        self.assertEqual(batch.stats.failed, 1)
        self.assertEqual(batch.errors[0].error_type, "PROCESSING_ERROR")
        self.assertIn("engine unavailable", batch.errors[0].error_message)

    def test_progress_callback(self):
        calls = []
        receipts = normalize_receipts(["Total 100", "Total 200"])
        self.processor.process_batch(receipts, lambda i, n, msg: calls.append((i, n)))
        self.assertEqual(calls, [(1, 2), (2, 2)])

    def test_empty_batch(self):
        batch = self.processor.process_batch([])
        self.assertEqual(batch.stats.total_receipts, 0)
        self.assertEqual(batch.stats.success_rate, 0.0)
        self.assertEqual(batch.stats.average_category_confidence, 0.0)


class TestDataFrameExport(unittest.TestCase):
    """Test conversion of results and errors to DataFrames."""

    def setUp(self):
        self.processor = ReceiptBatchProcessor()
        self.batch = self.processor.process_batch(normalize_receipts([
            {"id": "dinner", "text": RESTAURANT_RECEIPT},
            {"id": "bad", "text": ["not", "text"]},
        ]))

    def test_results_dataframe(self):
        df = self.processor.results_to_dataframe(self.batch.results)
        self.assertEqual(len(df), 1)
        self.assertEqual(df.iloc[0]["Receipt ID"], "dinner")
        self.assertEqual(df.iloc[0]["Category"], "Food")
        self.assertEqual(df.iloc[0]["Amount"], 483.0)
        for name in self.processor.engine.category_names:
            self.assertIn(f"Score {name}", df.columns)

    def test_errors_dataframe(self):
        df = self.processor.errors_to_dataframe(self.batch.errors)
        self.assertEqual(list(df.columns), ["Receipt ID", "Error Type", "Error Message", "Timestamp"])
        self.assertEqual(df.iloc[0]["Error Type"], "INVALID_TEXT")


if __name__ == '__main__':
    unittest.main()
