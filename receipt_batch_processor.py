"""
Receipt Batch Processor for processing many OCR receipts at once.
Handles JSON uploads with per-receipt error handling and summary statistics.
"""

import argparse
import json
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from receipt_engine import ReceiptEngine, ProcessResult

logger = logging.getLogger(__name__)


class InvalidReceiptStructureError(Exception):
    """Raised when JSON structure cannot be normalized to a list of receipts."""
    pass


@dataclass
class ProcessingError:
    """Details of a processing error."""
    receipt_id: str
    error_type: str
    error_message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class ReceiptResult:
    """Engine result for one receipt in a batch."""
    receipt_id: str
    result: ProcessResult


@dataclass
class BatchStats:
    """Statistics for batch processing."""
    total_receipts: int = 0
    processed: int = 0
    successful: int = 0
    failed: int = 0

    # Outcome counts
    categorized: int = 0
    uncategorized: int = 0
    amounts_found: int = 0
    by_category: Dict[str, int] = field(default_factory=dict)

    # Confidence totals
    total_category_confidence: float = 0.0
    total_amount_confidence: float = 0.0

    # Timing
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def average_category_confidence(self) -> float:
        """Average classifier confidence over successful receipts."""
        if self.successful == 0:
            return 0.0
        return self.total_category_confidence / self.successful

    @property
    def average_amount_confidence(self) -> float:
        """Average amount confidence over receipts where an amount was found."""
        if self.amounts_found == 0:
            return 0.0
        return self.total_amount_confidence / self.amounts_found

    @property
    def processing_time(self) -> float:
        """Calculate total processing time in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if self.total_receipts == 0:
            return 0.0
        return (self.successful / self.total_receipts) * 100


@dataclass
class BatchResult:
    """Complete result of batch processing."""
    stats: BatchStats
    results: List[ReceiptResult]
    errors: List[ProcessingError]
    error_summary: Dict[str, int] = field(default_factory=dict)


def normalize_receipts(data: Any) -> List[Dict[str, Any]]:
    """
    Normalize supported JSON layouts into a list of {"id", "text"} dicts.

    Supports {"receipts": [...]} and a direct array. Array items may be plain
    strings or objects with a "text" field and an optional "id".

    Raises:
        InvalidReceiptStructureError: If the layout is not recognised
    """
    if isinstance(data, dict) and "receipts" in data:
        items = data["receipts"]
    elif isinstance(data, list):
        items = data
    else:
        raise InvalidReceiptStructureError(
            "Invalid JSON format. Expected array or object with 'receipts' key"
        )

    if not isinstance(items, list):
        raise InvalidReceiptStructureError("'receipts' must be an array")

    receipts = []
    for idx, item in enumerate(items):
        if isinstance(item, dict):
            receipt_id = str(item.get("id", idx + 1))
            receipts.append({"id": receipt_id, "text": item.get("text")})
        else:
            receipts.append({"id": str(idx + 1), "text": item})
    return receipts


def load_receipts_from_json(content: Union[str, bytes]) -> List[Dict[str, Any]]:
    """Parse JSON content and normalize it into receipts."""
    if isinstance(content, bytes):
        content = content.decode("utf-8")
    return normalize_receipts(json.loads(content))


class ReceiptBatchProcessor:
    """Batch processor for OCR receipts."""

    def __init__(self, engine: Optional[ReceiptEngine] = None):
        """
        Initialize the batch processor.

        Args:
            engine: Receipt engine to use (defaults to one built on the packaged rules)
        """
        self.engine = engine or ReceiptEngine()
        logger.info(f"Initialized batch processor with {len(self.engine.category_names)} categories")

    def process_batch(
        self,
        receipts: List[Dict[str, Any]],
        progress_callback: Optional[Callable[[int, int, str], None]] = None
    ) -> BatchResult:
        """
        Process a batch of receipts.

        Args:
            receipts: List of {"id", "text"} dicts (see normalize_receipts)
            progress_callback: Optional callback(current, total, message)

        Returns:
            BatchResult with all processing results
        """
        stats = BatchStats(
            total_receipts=len(receipts),
            start_time=datetime.now()
        )

        results = []
        errors = []
        error_types: Dict[str, int] = {}

        logger.info(f"Starting batch processing of {len(receipts)} receipts")

        for idx, receipt in enumerate(receipts):
            receipt_id = str(receipt.get("id", idx + 1))
            stats.processed += 1

            if progress_callback:
                progress_callback(idx + 1, len(receipts), f"Processing: {receipt_id}")

            text = receipt.get("text")
            if not isinstance(text, str):
                errors.append(ProcessingError(
                    receipt_id=receipt_id,
                    error_type="INVALID_TEXT",
                    error_message=f"Receipt text must be a string, got {type(text).__name__}"
                ))
                stats.failed += 1
                error_types["INVALID_TEXT"] = error_types.get("INVALID_TEXT", 0) + 1
                logger.error(f"Invalid text in receipt {receipt_id}")
                continue

            try:
                result = self.engine.process(text)
            except Exception as e:
                errors.append(ProcessingError(
                    receipt_id=receipt_id,
                    error_type="PROCESSING_ERROR",
                    error_message=f"{type(e).__name__}: {str(e)}"
                ))
                stats.failed += 1
                error_types["PROCESSING_ERROR"] = error_types.get("PROCESSING_ERROR", 0) + 1
                logger.error(f"Processing error in receipt {receipt_id}: {traceback.format_exc()}")
                continue

            results.append(ReceiptResult(receipt_id=receipt_id, result=result))
            stats.successful += 1
            stats.total_category_confidence += result.category_confidence

            if result.category:
                stats.categorized += 1
                stats.by_category[result.category] = stats.by_category.get(result.category, 0) + 1
            else:
                stats.uncategorized += 1

            if result.amount is not None:
                stats.amounts_found += 1
                stats.total_amount_confidence += result.amount_confidence

        stats.end_time = datetime.now()

        logger.info(
            f"Batch processing complete: {stats.successful}/{stats.total_receipts} successful, "
            f"{stats.categorized} categorized, {stats.amounts_found} amounts found, "
            f"time: {stats.processing_time:.2f}s"
        )

        return BatchResult(
            stats=stats,
            results=results,
            errors=errors,
            error_summary=error_types
        )

    def results_to_dataframe(self, results: List[ReceiptResult]):
        """
        Convert receipt results to a pandas DataFrame.

        Args:
            results: List of ReceiptResult objects

        Returns:
            pandas DataFrame with one row per receipt and one score column per category
        """
        import pandas as pd

        rows = []
        for item in results:
            result = item.result
            row = {
                "Receipt ID": item.receipt_id,
                "Category": result.category or "",
                "Category Confidence": round(result.category_confidence, 3),
                "Amount": result.amount,
                "Amount Confidence": round(result.amount_confidence, 3),
            }
            for name, score in result.raw_scores.items():
                row[f"Score {name}"] = round(score, 2)
            rows.append(row)

        return pd.DataFrame(rows)

    def errors_to_dataframe(self, errors: List[ProcessingError]):
        """
        Convert processing errors to a pandas DataFrame.

        Args:
            errors: List of ProcessingError objects

        Returns:
            pandas DataFrame
        """
        import pandas as pd

        rows = []
        for error in errors:
            row = {
                "Receipt ID": error.receipt_id,
                "Error Type": error.error_type,
                "Error Message": error.error_message,
                "Timestamp": error.timestamp,
            }
            rows.append(row)

        return pd.DataFrame(rows)


def main():
    parser = argparse.ArgumentParser(description="Categorise a JSON file of OCR receipts")
    parser.add_argument("input", help="JSON file: array of receipts or {\"receipts\": [...]}")
    parser.add_argument("--output", help="CSV file to write results to")
    parser.add_argument("--rules", help="Alternative JSON rule table")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    with open(args.input, "r", encoding="utf-8") as f:
        receipts = load_receipts_from_json(f.read())

    processor = ReceiptBatchProcessor(ReceiptEngine(rules_path=args.rules))
    batch = processor.process_batch(receipts)
    df = processor.results_to_dataframe(batch.results)

    if args.output:
        df.to_csv(args.output, index=False)
        logger.info(f"Wrote {len(df)} rows to {args.output}")
    else:
        print(df.to_string(index=False))

    for error in batch.errors:
        logger.warning(f"{error.receipt_id}: {error.error_type} - {error.error_message}")


if __name__ == "__main__":
    main()
