from functools import wraps

from flask import current_app, g, request
from pydantic import ValidationError

from studymate.errors import AuthError, RequestValidationError

PRIVATE_USER_FIELDS = ("passwordHash", "token")

def services():
    return current_app.extensions["studymate"]

def _bearer_token():
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""

def _load_user(token):
    if not token:
        return None
    store = services()["store"]
    ref = store.get(f"authTokens/{token}")
    if not ref:
        return None
    user = store.get(f"users/{ref['uid']}")
    if user is None:
        return None
    return user

def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        user = _load_user(token)
        if user is None:
            raise AuthError()
        g.user = user
        g.token = token
        return view(*args, **kwargs)
    return wrapper

def public_user(user):
    return {k: v for k, v in user.items() if k not in PRIVATE_USER_FIELDS}

def parse_body(model, data=None):
    if data is None:
        data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    try:
        return model.model_validate(data)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
            for err in e.errors()
        ]
        raise RequestValidationError("Invalid request.", details=details)
