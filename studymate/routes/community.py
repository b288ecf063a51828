from flask import Blueprint, request, jsonify, g
from studymate.services.schemas import GRADE_LEVELS
from studymate.errors import RequestValidationError
from studymate.utils.context import login_required, services

community_bp = Blueprint('community', __name__, url_prefix='/community')

@community_bp.route('/rooms', methods=['GET'])
@login_required
def rooms():
    return jsonify({"items": services()["community"].list_rooms()})

@community_bp.route('/rooms/<room_id>', methods=['GET'])
@login_required
def room(room_id):
    community = services()["community"]
    details = community.get_room(room_id)
    members = community.leaderboard(room_id)
    return jsonify({
        "room": details,
        "members": members,
        "isMember": any(m.get("userId") == g.user["uid"] for m in members),
    })

@community_bp.route('/rooms/<room_id>/join', methods=['POST'])
@login_required
def join(room_id):
    member, created = services()["community"].join_room(room_id, g.user)
    return jsonify({"ok": True, "member": member, "created": created}), (201 if created else 200)

@community_bp.route('/rooms/<room_id>/challenge', methods=['GET'])
@login_required
def challenge(room_id):
    grade_level = (g.user.get("profile") or {}).get("gradeLevel")
    if grade_level not in GRADE_LEVELS:
        grade_level = "Other"
    community = services()["community"]
    return jsonify({
        "challenge": community.todays_challenge(room_id, grade_level=grade_level),
        "answers": community.answers(room_id),
    })

@community_bp.route('/rooms/<room_id>/challenge/answer', methods=['POST'])
@login_required
def challenge_answer(room_id):
    data = request.get_json(silent=True) or {}
    answer = str(data.get("answer") or "").strip()
    if not answer:
        raise RequestValidationError("Please write an answer first.")
    record = services()["community"].submit_answer(room_id, g.user, answer)
    return jsonify(record), 201
