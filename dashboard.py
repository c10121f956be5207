"""
Receipt Categorisation Review Dashboard

A non-intrusive Flask-based tool for reviewing receipt categorisation and
amount extraction. Receipts are run through the existing engine and the
results are returned with confidence scores and per-category raw scores.

This tool is read-only and does NOT modify the rule table or engine logic.
"""

import io
import os
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List

import pandas as pd
from flask import Flask, jsonify, request, send_file

from receipt_engine import ReceiptEngine, SettingsManager
from receipt_batch_processor import (
    InvalidReceiptStructureError,
    ReceiptBatchProcessor,
    normalize_receipts,
)


app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max request size

# Initialize engine (read-only usage)
engine = ReceiptEngine()
batch_processor = ReceiptBatchProcessor(engine)
settings_manager = SettingsManager(os.environ.get('RECEIPT_SETTINGS_FILE'))

EXPORT_COLUMNS = [
    'id', 'category', 'categoryConfidence', 'amount', 'amountConfidence',
]


def generate_summary(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Generate aggregate summary statistics from receipt results.

    Args:
        results: List of result dicts (ProcessResult.to_dict() plus 'id')

    Returns:
        Dictionary with summary statistics
    """
    summary = {
        'total_receipts': len(results),
        'by_category': defaultdict(int),
        'by_confidence_level': {
            'high': 0,      # >= 0.90
            'medium': 0,    # 0.75 - 0.89
            'low': 0,       # < 0.75, no category reported
        },
        'amounts_found': 0,
        'uncategorized': [],
    }

    for result in results:
        category = result['category'] or 'Uncategorized'
        summary['by_category'][category] += 1

        confidence = result['categoryConfidence']
        if confidence >= 0.90:
            summary['by_confidence_level']['high'] += 1
        elif confidence >= 0.75:
            summary['by_confidence_level']['medium'] += 1
        else:
            summary['by_confidence_level']['low'] += 1

        if result['amount'] is not None:
            summary['amounts_found'] += 1

        if result['category'] is None:
            summary['uncategorized'].append(result.get('id'))

    summary['by_category'] = dict(summary['by_category'])
    return summary


@app.route('/api/receipts/process', methods=['POST'])
def process_receipt_text():
    """Process a single receipt: expects JSON body {"text": "..."}."""
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or 'text' not in data:
        return jsonify({'error': 'No text provided'}), 400

    if not isinstance(data['text'], str):
        return jsonify({'error': 'Text must be a string'}), 400

    result = engine.process(data['text'])
    return jsonify(result.to_dict())


@app.route('/api/receipts/batch', methods=['POST'])
def process_receipt_batch():
    """
    Process many receipts.

    Expects {"receipts": [...]} or a JSON array; items are strings or
    objects with 'text' and optional 'id'.
    """
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'Request body must be JSON'}), 400

    try:
        receipts = normalize_receipts(data)
    except InvalidReceiptStructureError as e:
        app.logger.warning(f"Batch: {e}")
        return jsonify({'error': str(e)}), 400

    batch = batch_processor.process_batch(receipts)
    results = [
        {'id': item.receipt_id, **item.result.to_dict()}
        for item in batch.results
    ]
    errors = [
        {'id': error.receipt_id, 'type': error.error_type, 'error': error.error_message}
        for error in batch.errors
    ]

    return jsonify({
        'success': True,
        'total_receipts': batch.stats.total_receipts,
        'results': results,
        'summary': generate_summary(results),
        'errors': errors if errors else None,
    })


@app.route('/api/categories', methods=['GET'])
def list_categories():
    """List the categories the engine can assign, in tie-break order."""
    return jsonify({'categories': engine.category_names})


@app.route('/api/settings', methods=['GET'])
def get_settings():
    """Return all settings with defaults applied."""
    return jsonify(settings_manager.all_settings())


@app.route('/api/settings/<key>', methods=['GET', 'PUT'])
def setting(key):
    """Read or write a single setting. PUT expects {"value": "..."}."""
    if request.method == 'GET':
        value = settings_manager.get_setting(key)
        if value is None:
            return jsonify({'error': f'Unknown setting: {key}'}), 404
        return jsonify({'key': key, 'value': value})

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or 'value' not in data:
        return jsonify({'error': 'No value provided'}), 400

    value = data['value']
    if isinstance(value, str):
        settings_manager.set_setting(key, value)
    else:
        settings_manager.set_setting_object(key, value)
    return jsonify({'success': True})


@app.route('/export/csv', methods=['POST'])
def export_csv():
    """
    Export receipt results to CSV format.

    Expects JSON body with 'results' field containing receipt results.
    """
    try:
        data = request.get_json(silent=True)

        if not isinstance(data, dict) or 'results' not in data:
            app.logger.warning("CSV export: No results provided in request")
            return jsonify({'error': 'No results provided'}), 400

        results = data['results']

        if not isinstance(results, list):
            app.logger.error(f"CSV export: Results is not a list, got {type(results)}")
            return jsonify({'error': 'Results must be an array'}), 400

        df = pd.DataFrame(results)
        df = df.reindex(columns=EXPORT_COLUMNS)  # Missing fields become empty cells
        csv_data = df.to_csv(index=False).encode('utf-8')

        # Generate filename with timestamp
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'receipt_results_{timestamp}.csv'

        app.logger.info(f"CSV export: Successfully exported {len(results)} results")

        return send_file(
            io.BytesIO(csv_data),
            mimetype='text/csv',
            as_attachment=True,
            download_name=filename
        )
    except Exception as e:
        app.logger.error(f"CSV export error: {str(e)}", exc_info=True)
        return jsonify({'error': f'Failed to export CSV: {str(e)}'}), 500


if __name__ == '__main__':
    import logging

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    print("=" * 80)
    print("Receipt Categorisation Review Dashboard")
    print("=" * 80)
    print("\nStarting dashboard on http://localhost:5001")
    print("This is a READ-ONLY tool that does not modify the rule table.")
    print("\nPress Ctrl+C to stop the server.")
    print("=" * 80)

    # Debug mode is controlled by environment variable
    debug_mode = os.environ.get('FLASK_DEBUG', '0') == '1'
    app.run(debug=debug_mode, port=5001, host='0.0.0.0')
