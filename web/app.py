"""Flask JSON API for household maintenance tracking."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from flask import Flask, jsonify, request

# Add parent directory to path for model imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.calculations import to_datetime
from models.loader import subject_to_dict, topic_to_dict
from models.repository import MaintenanceRepository, MemoryRepository, YamlRepository

logger = logging.getLogger(__name__)

# Default data file (relative to project root)
DEFAULT_DATA_FILE = Path(__file__).parent.parent / "data" / "maintenance.yaml"

# JSON body key -> repository field
SUBJECT_KEYS = {
    "name": "name",
    "type": "type",
    "currentMileage": "current_mileage",
    "currentHours": "current_hours",
}
TOPIC_KEYS = {
    "name": "name",
    "steps": "steps",
    "tools": "tools",
    "durationValue": "duration_value",
    "durationType": "duration_type",
    "scheduledDate": "scheduled_date",
    "notes": "notes",
    "lastCompletedDate": "last_completed_date",
    "lastCompletedMileage": "last_completed_mileage",
    "lastCompletedHours": "last_completed_hours",
}


def repository_from_env() -> MaintenanceRepository:
    """Pick the storage adapter named by STORAGE_ADAPTER (memory or yaml)."""
    adapter = os.environ.get("STORAGE_ADAPTER", "memory").lower()
    if adapter == "yaml":
        path = os.environ.get("MAINT_DATA_FILE") or DEFAULT_DATA_FILE
        logger.info("Using YAML storage at %s", path)
        return YamlRepository(path)
    if adapter != "memory":
        logger.warning("Unknown STORAGE_ADAPTER '%s', falling back to memory", adapter)
    return MemoryRepository()


def error(message: str, status: int):
    return jsonify({"error": message}), status


def method_not_allowed(allowed):
    response, status = error("Method not allowed", 405)
    response.headers["Allow"] = ", ".join(allowed)
    return response, status


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def pick_fields(body: dict, keys: dict) -> dict:
    """Translate the camelCase keys present in a JSON body to field names."""
    return {field: body[key] for key, field in keys.items() if key in body}


def parse_now(value):
    """The instant a status batch is computed against (default: now, UTC)."""
    if not value:
        return datetime.now(timezone.utc)
    return to_datetime(value)


def create_app(repository: MaintenanceRepository = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod")
    app.config["REPOSITORY"] = repository if repository is not None else repository_from_env()

    def repo() -> MaintenanceRepository:
        return app.config["REPOSITORY"]

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return error(str(e), 400)

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok", "time": datetime.now(timezone.utc).isoformat()})

    @app.route("/api/maintenance/subjects", methods=["GET", "POST", "PUT", "DELETE"])
    def subjects():
        """List, create, update or delete subjects."""
        if request.method == "GET":
            return jsonify([subject_to_dict(s) for s in repo().list_subjects()])

        if request.method == "POST":
            body = json_body()
            if not body.get("name") or not body.get("type"):
                return error("Name and type are required", 400)
            subject = repo().create_subject(
                body["name"],
                body["type"],
                current_mileage=body.get("currentMileage"),
                current_hours=body.get("currentHours"),
            )
            return jsonify(subject_to_dict(subject)), 201

        subject_id = request.args.get("id")
        if not subject_id:
            return error("Subject ID is required", 400)

        if request.method == "PUT":
            body = json_body()
            subject = repo().update_subject(subject_id, **pick_fields(body, SUBJECT_KEYS))
            if subject is None:
                return error("Subject not found", 404)
            return jsonify(subject_to_dict(subject))

        if not repo().delete_subject(subject_id):
            return error("Subject not found", 404)
        return jsonify({"success": True})

    @app.route("/api/maintenance/topics", methods=["GET", "POST", "PUT", "DELETE"])
    def topics():
        """List, create, complete, update or delete topics."""
        if request.method == "GET":
            subject_id = request.args.get("subjectId")
            return jsonify([topic_to_dict(t) for t in repo().list_topics(subject_id)])

        if request.method == "POST":
            body = json_body()

            if body.get("action") == "complete":
                topic_id = body.get("id") or body.get("topicId")
                if not topic_id or not body.get("date"):
                    return error("ID and date are required", 400)
                topic = repo().complete_topic_maintenance(
                    body.get("subjectId"),
                    topic_id,
                    body["date"],
                    mileage=body.get("mileage"),
                    hours=body.get("hours"),
                    notes=body.get("notes"),
                )
                if topic is None:
                    return error("Topic not found", 404)
                return jsonify(topic_to_dict(topic))

            if not body.get("subjectId") or not body.get("name"):
                return error("Subject ID and name are required", 400)
            if repo().get_subject(body["subjectId"]) is None:
                return error("Subject not found", 404)
            topic = repo().create_topic(
                body["subjectId"],
                body["name"],
                duration_value=body.get("durationValue"),
                duration_type=body.get("durationType"),
                steps=body.get("steps"),
                tools=body.get("tools"),
                scheduled_date=body.get("scheduledDate"),
                notes=body.get("notes"),
            )
            return jsonify(topic_to_dict(topic)), 201

        topic_id = request.args.get("id")
        if not topic_id:
            return error("Topic ID is required", 400)

        if request.method == "PUT":
            body = json_body()
            topic = repo().update_topic(topic_id, **pick_fields(body, TOPIC_KEYS))
            if topic is None:
                return error("Topic not found", 404)
            return jsonify(topic_to_dict(topic))

        if not repo().delete_topic(topic_id):
            return error("Topic not found", 404)
        return jsonify({"success": True})

    @app.route("/api/maintenance/status")
    def status():
        """Computed status for every topic, all against one instant."""
        subject_id = request.args.get("subjectId")
        now = parse_now(request.args.get("asOf"))
        garage = repo().garage()

        if subject_id and garage.get_subject(subject_id) is None:
            return error("Subject not found", 404)

        topic_statuses = [
            dict(s.to_dict(), subjectId=subject.id, name=topic.name)
            for subject, topic, s in garage.get_all_topic_status(now, subject_id=subject_id)
        ]
        summaries = [
            s.to_dict()
            for s in garage.get_all_summaries(now)
            if not subject_id or s.subject_id == subject_id
        ]
        return jsonify({"asOf": now.isoformat(), "topics": topic_statuses, "subjects": summaries})

    # Routes answer 405 through Flask for methods they do not declare
    app.register_error_handler(405, lambda e: method_not_allowed(e.valid_methods or []))

    return app


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    app.run(debug=True, host="0.0.0.0", port=5001)
