"""Flask REST API hosting the expense ledger core."""

from __future__ import annotations

import atexit
import io
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS

from expense_ledger.exceptions import PersistenceError, ValidationError
from expense_ledger.models import CATEGORIES
from expense_ledger.runner import AsyncLoopRunner
from expense_ledger.storage import FileStore, KeyValueStore
from expense_ledger.sync import SyncClient
from expense_ledger.tracker import ExpenseTracker

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def create_app(
    data_dir: Optional[Path] = None,
    *,
    store: Optional[KeyValueStore] = None,
    sync_client: Optional[SyncClient] = None,
) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    log_level = os.getenv("EXPENSE_TRACKER_LOG_LEVEL")
    if log_level:
        logging.getLogger("expense_ledger").setLevel(log_level.upper())

    if store is None:
        store = FileStore(Path(data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data")))
    runner = AsyncLoopRunner()
    tracker = ExpenseTracker(store, sync_client=sync_client)
    runner.run(tracker.start())

    def _shutdown() -> None:
        if runner.closed:
            return
        runner.run(tracker.close())
        runner.close()

    # Registered after the runner's own hook, so it runs before the loop stops.
    atexit.register(_shutdown)
    app.extensions["expense_tracker"] = tracker
    app.extensions["expense_tracker_runner"] = runner

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    @app.get("/categories")
    def list_categories():
        return _success({"items": list(CATEGORIES)})

    @app.get("/expenses")
    def list_expenses():
        records, summary = runner.call(lambda: (tracker.snapshot(), tracker.summary()))
        return _success({"items": [record.to_dict() for record in records], **summary})

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        result = runner.run(tracker.add_expense(payload))
        return _success(result.to_dict(), 201)

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        runner.run(tracker.remove_expense(expense_id))
        return _success({}, 204)

    @app.get("/summary")
    def summary():
        return _success(runner.call(tracker.summary))

    @app.get("/export")
    def export_expenses():
        filename, data = runner.call(tracker.export)
        return send_file(
            io.BytesIO(data),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=filename,
        )

    @app.get("/settings")
    def get_settings():
        return _success({"destination_url": runner.call(lambda: tracker.settings.destination)})

    @app.put("/settings")
    def update_settings():
        payload = _json_body()
        url = payload.get("destination_url")
        if url is not None and not isinstance(url, str):
            raise ValidationError("destination_url must be a string")
        destination = runner.run(tracker.save_destination(url))
        return _success({"destination_url": destination, "message": "Settings saved!"})

    return app
