from flask import Blueprint, jsonify, g, request
from studymate.errors import RequestValidationError
from studymate.services.schemas import GRADE_LEVELS, OnboardingRequest
from studymate.utils.context import login_required, parse_body, public_user, services

main_bp = Blueprint('main', __name__)

FEATURES = [
    {"title": "Essay Review", "description": "Get instant AI feedback on your writing.", "href": "/api/essay-feedback"},
    {"title": "Flashcard Generator", "description": "Create study decks from your notes automatically.", "href": "/api/flashcards"},
    {"title": "Smart Study Plan", "description": "Generate a personalized study schedule.", "href": "/api/study-plan"},
    {"title": "Focus Mode", "description": "Start a distraction-free study session.", "href": "/focus/state"},
]

@main_bp.route('/dashboard')
@login_required
def dashboard():
    svc = services()
    uid = g.user["uid"]
    streak = svc["focus"].study_streak(uid)
    if streak != g.user.get("studyStreak"):
        svc["store"].update(f"users/{uid}", {"studyStreak": streak})
    quizzes = svc["store"].list(f"users/{uid}/quizzes", order_by="createdAt", descending=True, limit=5)
    return jsonify({
        "user": public_user({**g.user, "studyStreak": streak}),
        "studyStreak": streak,
        "needsOnboarding": not g.user.get("profileComplete"),
        "studyPlan": g.user.get("studyPlan"),
        "recentQuizzes": quizzes,
        "features": FEATURES,
    })

@main_bp.route('/onboarding', methods=['GET'])
@login_required
def onboarding_options():
    return jsonify({"gradeLevels": list(GRADE_LEVELS), "profileComplete": bool(g.user.get("profileComplete"))})

@main_bp.route('/onboarding', methods=['POST'])
@login_required
def onboarding():
    req = parse_body(OnboardingRequest)
    store = services()["store"]
    user = store.set(f"users/{g.user['uid']}", {
        "displayName": req.display_name,
        "profile": {
            "gradeLevel": req.grade_level,
            "subjects": req.subjects,
            "weeklyFreeHours": req.weekly_free_hours,
        },
        "profileComplete": True,
    }, merge=True)
    return jsonify({"ok": True, "user": public_user(user)})

@main_bp.route('/settings', methods=['GET'])
@login_required
def settings():
    return jsonify({"user": public_user(g.user)})

@main_bp.route('/settings', methods=['POST'])
@login_required
def settings_update():
    data = request.get_json(silent=True) or {}
    updates = {}
    if "displayName" in data:
        name = str(data.get("displayName") or "").strip()
        if not name:
            raise RequestValidationError("displayName cannot be empty")
        updates["displayName"] = name
    if "photoURL" in data:
        updates["photoURL"] = data.get("photoURL") or None
    if isinstance(data.get("profile"), dict):
        merged = {**(g.user.get("profile") or {}), **data["profile"]}
        try:
            req = OnboardingRequest.model_validate({**merged, "displayName": updates.get("displayName", g.user.get("displayName") or "-")})
        except ValueError as e:
            raise RequestValidationError(str(e))
        updates["profile"] = {
            **merged,
            "gradeLevel": req.grade_level,
            "subjects": req.subjects,
            "weeklyFreeHours": req.weekly_free_hours,
        }
    user = services()["store"].set(f"users/{g.user['uid']}", updates, merge=True)
    return jsonify({"ok": True, "user": public_user(user)})
