#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API in front of one TaskBoard. Clients render the columns from
GET /api/board and send their gestures back as intents.

Usage:
    python -m taskboard.server --port 3000 --db ~/.local/share/taskboard/tasks.db

API:
    GET    /api/board               → { columns, counts, version }
    POST   /api/tasks               → body { title }            → 201 { id }
    PUT    /api/tasks/<id>          → body { title }            → { changed }
    DELETE /api/tasks/<id>          → { deleted }
    POST   /api/tasks/<id>/move     → body { status }           → { status }
    POST   /api/drop                → body { task_id, target_column | target_task_id,
                                             status? }
                                      → { status }  (null = nothing moved)
    GET    /health
"""

import argparse
import logging
import sys

from flask import Flask, current_app, jsonify, request

from .board import TaskBoard
from .config import Config
from .errors import NotFoundError, TransportError, ValidationError
from .resolver import available_actions
from .schema import DragPayload, TaskStatus
from .store import SQLiteTaskStore

logger = logging.getLogger(__name__)


def create_app(board: TaskBoard) -> Flask:
    """Build the Flask app around an already opened board."""
    app = Flask(__name__)
    app.config["BOARD"] = board

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e), "id": e.task_id}), 404

    @app.errorhandler(TransportError)
    def handle_transport(e):
        app.logger.warning(f"Store unavailable: {e}")
        return jsonify({"error": "Task store unavailable"}), 503

    _register_routes(app)
    return app


def _board() -> TaskBoard:
    return current_app.config["BOARD"]


def _body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _register_routes(app: Flask) -> None:

    @app.route("/api/board")
    def api_board():
        board = _board()
        columns = board.columns()
        cards = columns.to_dict()
        for column in cards.values():
            for card in column:
                card["actions"] = [a.value for a in available_actions(card["status"])]
        return jsonify({
            "columns": cards,
            "counts":  columns.counts(),
            "version": board.view.version,
        })

    @app.route("/api/tasks", methods=["POST"])
    def api_create_task():
        task_id = _board().add_submit(_body().get("title", ""))
        return jsonify({"id": task_id}), 201

    @app.route("/api/tasks/<task_id>", methods=["PUT"])
    def api_rename_task(task_id):
        changed = _board().edit_confirm(task_id, _body().get("title", ""))
        return jsonify({"id": task_id, "changed": changed})

    @app.route("/api/tasks/<task_id>", methods=["DELETE"])
    def api_delete_task(task_id):
        _board().delete_click(task_id)
        return jsonify({"deleted": task_id})

    @app.route("/api/tasks/<task_id>/move", methods=["POST"])
    def api_move_task(task_id):
        status = TaskStatus.parse(_body().get("status", ""))
        board = _board()
        task = board.view.find(task_id)
        if task is None:
            raise NotFoundError(task_id, f"Task {task_id} is not on the board")
        if status not in {a.target for a in available_actions(task.status)}:
            raise ValidationError(f"Cannot move a {task.status.value} task to {status.value}")
        if status is TaskStatus.INPROCESS:
            moved = board.move_to_in_process(task_id)
        else:
            moved = board.move_to_complete(task_id)
        return jsonify({"id": task_id, "status": moved.value})

    @app.route("/api/drop", methods=["POST"])
    def api_drop():
        data = _body()
        board = _board()
        task_id = data.get("task_id")
        if not task_id:
            raise ValidationError("task_id is required")
        target_task_id = data.get("target_task_id")
        if target_task_id:
            # Dropped on a card: its column is wherever that card is now
            target_card = board.view.find(target_task_id)
            if target_card is None:
                raise NotFoundError(target_task_id, f"Task {target_task_id} is not on the board")
            target = target_card.status
        else:
            target = TaskStatus.parse(data.get("target_column", ""))
        if data.get("status"):
            # Payload as the client captured it at drag start
            payload = DragPayload(
                task_id=task_id,
                title=data.get("title", ""),
                status=TaskStatus.parse(data["status"]),
            )
        else:
            payload = board.drag_start(task_id)
        moved = board.drop_on(target, payload, target_task_id)
        return jsonify({"id": task_id, "status": moved.value if moved else None})

    @app.route("/health")
    def health():
        board = _board()
        return jsonify({
            "status": "ok",
            "feed":   "open" if board.feed.is_open else "closed",
            "tasks":  len(board.view),
        })


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to taskboard.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to tasks.db (overrides TASKBOARD_DB)")
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.db:
        cfg.db_path = args.db
        cfg.resolve_paths()

    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format=cfg.log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    store = SQLiteTaskStore(cfg.db_path)
    board = TaskBoard(store)
    board.on_error(lambda origin, e: logger.warning(f"{type(e).__name__} for {origin}: {e}"))
    with board:
        store.start_watching(cfg.poll_interval)
        try:
            logger.info(f"Serving task board on http://{cfg.host}:{cfg.port} (db: {cfg.db_path})")
            app = create_app(board)
            app.run(host=cfg.host, port=cfg.port, debug=False, threaded=True)
        finally:
            store.stop_watching()


if __name__ == "__main__":
    main()
