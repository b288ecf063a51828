from flask import Blueprint, request, jsonify, g, current_app
import uuid
from werkzeug.security import check_password_hash, generate_password_hash
from studymate.errors import AuthError, ConflictError, RequestValidationError
from studymate.services.data_service import SERVER_TIMESTAMP
from studymate.utils.context import login_required, public_user, services
from studymate.utils.helpers import _hash, _create_token

auth_bp = Blueprint('auth', __name__)

def _credentials():
    data = request.get_json(silent=True) or {}
    email = str(data.get("email") or "").strip().lower()
    password = str(data.get("password") or "")
    return email, password, data

def _issue_token(store, uid):
    token = _create_token()
    store.set(f"authTokens/{token}", {"uid": uid, "createdAt": SERVER_TIMESTAMP})
    store.update(f"users/{uid}", {"token": token})
    return token

@auth_bp.route('/auth/register', methods=['POST'])
def register():
    email, password, data = _credentials()
    if not email or not password:
        raise RequestValidationError("missing credentials")
    if len(password) < 6:
        raise RequestValidationError("password must be at least 6 characters")
    store = services()["store"]
    email_key = _hash(email)
    uid = uuid.uuid4().hex[:12]
    if not store.create(f"userEmails/{email_key}", {"uid": uid}):
        raise ConflictError("An account with this email already exists.")
    display_name = str(data.get("displayName") or "").strip() or email.split("@")[0] or "New User"
    store.set(f"users/{uid}", {
        "uid": uid,
        "email": email,
        "displayName": display_name,
        "photoURL": None,
        "profileComplete": False,
        "studyStreak": 0,
        "passwordHash": generate_password_hash(password),
        "createdAt": SERVER_TIMESTAMP,
    })
    token = _issue_token(store, uid)
    current_app.logger.info('Registered user %s', uid)
    return jsonify({"user_id": uid, "token": token}), 201

@auth_bp.route('/auth/login', methods=['POST'])
def login():
    email, password, _ = _credentials()
    store = services()["store"]
    ref = store.get(f"userEmails/{_hash(email)}") if email else None
    user = store.get(f"users/{ref['uid']}") if ref else None
    if not user or not check_password_hash(user.get("passwordHash") or "", password):
        raise AuthError("Invalid email or password.")
    token = _issue_token(store, user["uid"])
    return jsonify({"user_id": user["uid"], "token": token})

@auth_bp.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    store = services()["store"]
    store.delete(f"authTokens/{g.token}")
    return jsonify({"ok": True})

@auth_bp.route('/auth/me', methods=['GET'])
@login_required
def me():
    return jsonify({"user": public_user(g.user)})
