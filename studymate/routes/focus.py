from flask import Blueprint, request, jsonify, g
from studymate.errors import RequestValidationError
from studymate.utils.context import login_required, services

focus_bp = Blueprint('focus', __name__, url_prefix='/focus')

def _use_ai():
    data = request.get_json(silent=True) or {}
    return bool(data.get("ai")) or request.args.get("ai") == "1"

@focus_bp.route('/state', methods=['GET'])
@login_required
def state():
    return jsonify(services()["focus"].state(g.user["uid"]))

@focus_bp.route('/start', methods=['POST'])
@login_required
def start():
    return jsonify(services()["focus"].start(g.user["uid"], use_ai=_use_ai()))

@focus_bp.route('/pause', methods=['POST'])
@login_required
def pause():
    return jsonify(services()["focus"].pause(g.user["uid"]))

@focus_bp.route('/reset', methods=['POST'])
@login_required
def reset():
    return jsonify(services()["focus"].reset(g.user["uid"]))

@focus_bp.route('/tick', methods=['POST'])
@login_required
def tick():
    data = request.get_json(silent=True) or {}
    try:
        seconds = int(data.get("seconds", 1))
    except (TypeError, ValueError):
        raise RequestValidationError("seconds must be an integer")
    if seconds < 0:
        raise RequestValidationError("seconds cannot be negative")
    return jsonify(services()["focus"].tick(g.user["uid"], seconds, use_ai=_use_ai()))

@focus_bp.route('/nudge', methods=['GET'])
@login_required
def nudge():
    return jsonify({"message": services()["focus"].nudge(use_ai=_use_ai())})
