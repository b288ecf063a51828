from flask import Blueprint, request, jsonify, g, current_app
from studymate.errors import NotFoundError
from studymate.services.data_service import SERVER_TIMESTAMP
from studymate.services.schemas import (
    EssayFeedbackRequest,
    ExamReadinessRequest,
    FlashcardRequest,
    QuizHistoryRequest,
    QuizRequest,
    StudyPlanRequest,
)
from studymate.utils.context import login_required, parse_body, services

api_bp = Blueprint('api', __name__, url_prefix='/api')

def _history(name):
    return f"users/{g.user['uid']}/{name}"

@api_bp.route('/essay-feedback', methods=['POST'])
@login_required
def essay_feedback():
    req = parse_body(EssayFeedbackRequest)
    feedback = services()["ai"].analyze_essay(req).to_wire()
    essay_id = services()["store"].add(_history("essays"), {
        "originalText": req.text,
        "feedback": feedback,
        "createdAt": SERVER_TIMESTAMP,
    })
    return jsonify({"id": essay_id, "feedback": feedback})

@api_bp.route('/essays', methods=['GET'])
@login_required
def essays():
    items = services()["store"].list(_history("essays"), order_by="createdAt", descending=True)
    return jsonify({"items": items})

@api_bp.route('/flashcards', methods=['POST'])
@login_required
def flashcards():
    req = parse_body(FlashcardRequest)
    result = services()["ai"].generate_flashcards(req).to_wire()
    title = (req.title or "").strip() or "Untitled Deck"
    deck_id = services()["store"].add(_history("decks"), {
        "title": title,
        "flashcards": result["flashcards"],
        "createdAt": SERVER_TIMESTAMP,
    })
    current_app.logger.info('Generated %d flashcards for %s', len(result["flashcards"]), g.user["uid"])
    return jsonify({"id": deck_id, "title": title, "flashcards": result["flashcards"]})

@api_bp.route('/decks', methods=['GET'])
@login_required
def decks():
    items = services()["store"].list(_history("decks"), order_by="createdAt", descending=True)
    summary = [{"id": d["id"], "title": d.get("title"), "count": len(d.get("flashcards") or []),
                "createdAt": d.get("createdAt")} for d in items]
    return jsonify({"items": summary})

@api_bp.route('/decks/<deck_id>', methods=['GET'])
@login_required
def deck(deck_id):
    item = services()["store"].get(f"{_history('decks')}/{deck_id}")
    if item is None:
        raise NotFoundError("Deck not found.")
    return jsonify({"id": deck_id, **item})

@api_bp.route('/quiz', methods=['POST'])
@login_required
def quiz():
    req = parse_body(QuizRequest)
    result = services()["ai"].generate_quiz(req)
    return jsonify({"topic": req.topic, **result.to_wire()})

@api_bp.route('/quizzes', methods=['POST'])
@login_required
def quiz_history_add():
    req = parse_body(QuizHistoryRequest)
    quiz_id = services()["store"].add(_history("quizzes"), {
        "topic": req.topic,
        "score": min(req.score, req.total),
        "total": req.total,
        "questions": req.questions,
        "createdAt": SERVER_TIMESTAMP,
    })
    return jsonify({"ok": True, "id": quiz_id}), 201

@api_bp.route('/quizzes', methods=['GET'])
@login_required
def quiz_history():
    items = services()["store"].list(_history("quizzes"), order_by="createdAt", descending=True)
    return jsonify({"items": items})

@api_bp.route('/study-plan', methods=['POST'])
@login_required
def study_plan():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    # fall back to the onboarding profile when the form omits it
    if "profile" not in data and g.user.get("profile"):
        data = {**data, "profile": g.user["profile"]}
    req = parse_body(StudyPlanRequest, data)
    plan = services()["ai"].generate_study_plan(req).to_wire()
    services()["store"].update(f"users/{g.user['uid']}", {"studyPlan": plan})
    return jsonify(plan)

@api_bp.route('/exam-readiness', methods=['POST'])
@login_required
def exam_readiness():
    req = parse_body(ExamReadinessRequest)
    return jsonify(services()["ai"].calculate_exam_readiness(req).to_wire())

@api_bp.route('/motivation', methods=['GET'])
@login_required
def motivation():
    return jsonify(services()["ai"].generate_motivation_nudge().to_wire())
