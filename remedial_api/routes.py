from flask import Blueprint, current_app, jsonify, request

from reading_core.errors import InputError, NotFoundError, PersistenceError

from .service import get_session_progress, get_session_status, save_session
from .validator import MISSING_IDENTIFIERS, parse_submission, to_id, to_text

remedial_bp = Blueprint("remedial", __name__)


@remedial_bp.errorhandler(InputError)
def handle_input_error(exc):
    return jsonify({"success": False, "error": exc.message}), 400


@remedial_bp.errorhandler(NotFoundError)
def handle_not_found(exc):
    return jsonify({"success": False, "error": exc.message}), 404


@remedial_bp.errorhandler(PersistenceError)
def handle_persistence_error(exc):
    return jsonify({"success": False, "error": exc.message}), 500


@remedial_bp.route("/session", methods=["POST"])
def submit_session():
    submission = parse_submission(request.get_json(silent=True))
    result = save_session(submission, default_threshold=current_app.config["MASTERY_THRESHOLD"])
    return jsonify({"success": True, **result.to_dict()}), 200


@remedial_bp.route("/session", methods=["GET"])
def fetch_session():
    student_id = to_text(request.args.get("studentId"))
    schedule_id = to_id(request.args.get("approvedScheduleId"))
    if student_id is None or schedule_id is None:
        raise InputError(MISSING_IDENTIFIERS)

    return jsonify({"success": True, **get_session_progress(student_id, schedule_id)}), 200


@remedial_bp.route("/session/status", methods=["POST"])
def session_status():
    payload = request.get_json(silent=True) or {}
    schedule_id = to_id(payload.get("approvedScheduleId"))
    subject_id = to_id(payload.get("subjectId"))
    student_ids = payload.get("studentIds")
    if schedule_id is None or subject_id is None or not isinstance(student_ids, list):
        raise InputError(MISSING_IDENTIFIERS)

    status = get_session_status(
        schedule_id,
        subject_id,
        student_ids,
        phonemic_id=to_id(payload.get("phonemicId")),
    )
    return jsonify({"success": True, "statusByStudent": status}), 200
