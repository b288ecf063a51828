import io
import base64
import binascii
import hashlib
import random
import uuid
from datetime import datetime, date, timedelta, timezone

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from studymate.errors import MissingInputError

ADJECTIVES = [
    "Brave", "Calm", "Clever", "Curious", "Eager", "Gentle", "Happy", "Jolly",
    "Kind", "Lively", "Lucky", "Mighty", "Nimble", "Quiet", "Swift", "Witty",
]
ANIMALS = [
    "Cat", "Dog", "Rabbit", "Fox", "Bear", "Panda", "Koala", "Tiger", "Lion",
    "Otter", "Owl", "Falcon", "Dolphin", "Hedgehog", "Penguin", "Wolf",
]

def _hash(s):
    return hashlib.sha256((s or "").encode("utf-8")).hexdigest()

def _create_token():
    return uuid.uuid4().hex

def _new_id():
    return uuid.uuid4().hex[:20]

def _utcnow_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

def _today_key(today=None):
    return (today or date.today()).isoformat()

def _anonymous_name(rng=random):
    return f"{rng.choice(ADJECTIVES)} {rng.choice(ANIMALS)}"

def _format_time(seconds):
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"

def _compute_streak(active_dates, today=None):
    """Consecutive active days ending today, or ending yesterday if today has no activity yet."""
    today = today or date.today()
    current = today
    if current.isoformat() not in active_dates:
        current -= timedelta(days=1)
    streak = 0
    while current.isoformat() in active_dates:
        streak += 1
        current -= timedelta(days=1)
    return streak

def _decode_base64(data):
    if "," in data and data.lstrip().startswith("data:"):
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError):
        raise MissingInputError("The uploaded file could not be decoded.")

def _extract_pdf_text(pdf_b64):
    raw = _decode_base64(pdf_b64)
    try:
        reader = PdfReader(io.BytesIO(raw))
        text = "\n".join((page.extract_text() or "") for page in reader.pages)
    except PdfReadError:
        raise MissingInputError("The uploaded PDF could not be read.")
    return text.strip()

def _image_data_url(image_data):
    image_data = (image_data or "").strip()
    if image_data.startswith("data:image/"):
        return image_data
    return f"data:image/jpeg;base64,{image_data}"
