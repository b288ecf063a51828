import logging
import random

from studymate.errors import ConflictError, NotFoundError
from studymate.services.data_service import SERVER_TIMESTAMP, Increment
from studymate.services.schemas import ChallengeAnswerRequest, ChallengeQuestionRequest
from studymate.utils.helpers import _anonymous_name, _today_key

logger = logging.getLogger(__name__)

ROOMS = "communityRooms"

DEFAULT_ROOMS = [
    {"id": "math-students", "name": "Math Students Room", "topic": "Mathematics",
     "description": "For all the calculus crusaders and algebra aces."},
    {"id": "cs-wizards", "name": "Computer Science Room", "topic": "Computer Science",
     "description": "Code, algorithms, and everything in between."},
    {"id": "final-exam-prep", "name": "Final Exam Room", "topic": "General exam revision",
     "description": "The final push! Let's get through it together."},
]


class CommunityService:
    def __init__(self, store, ai, rng=None):
        self.store = store
        self.ai = ai
        self.rng = rng or random.Random()

    def _seed_default_rooms(self):
        with self.store.transaction(ROOMS):
            if self.store.list(ROOMS):
                return
            for room in DEFAULT_ROOMS:
                fields = {k: v for k, v in room.items() if k != "id"}
                self.store.create(f"{ROOMS}/{room['id']}", {**fields, "memberCount": 0})

    def list_rooms(self):
        self._seed_default_rooms()
        return self.store.list(ROOMS, order_by="name")

    def get_room(self, room_id):
        self._seed_default_rooms()
        room = self.store.get(f"{ROOMS}/{room_id}")
        if room is None:
            raise NotFoundError("Room not found.")
        return {"id": room_id, **room}

    def leaderboard(self, room_id):
        self.get_room(room_id)
        members = self.store.list(f"{ROOMS}/{room_id}/members", order_by="studyStreak", descending=True)
        for rank, m in enumerate(members, start=1):
            m["rank"] = rank
        return members

    def join_room(self, room_id, user):
        room_path = f"{ROOMS}/{room_id}"
        member_path = f"{room_path}/members/{user['uid']}"
        streak = int(user.get("studyStreak") or 0)
        with self.store.transaction(ROOMS):
            self.get_room(room_id)
            existing = self.store.get(member_path)
            if existing is not None:
                member = self.store.update(member_path, {"studyStreak": streak})
                return member, False
            member = self.store.set(member_path, {
                "userId": user["uid"],
                "anonymousName": _anonymous_name(self.rng),
                "studyStreak": streak,
                "joinedAt": SERVER_TIMESTAMP,
            })
            self.store.update(room_path, {"memberCount": Increment(1)})
        logger.info("User %s joined room %s as %s", user["uid"], room_id, member["anonymousName"])
        return member, True

    def _is_member(self, room_id, uid):
        return self.store.exists(f"{ROOMS}/{room_id}/members/{uid}")

    def todays_challenge(self, room_id, grade_level="Other", today=None):
        room = self.get_room(room_id)
        date_key = _today_key(today)
        path = f"{ROOMS}/{room_id}/challenges/{date_key}"
        existing = self.store.get(path)
        if existing is not None:
            return {"id": date_key, **existing}

        # generated outside the lock; the first stored question wins
        generated = self.ai.generate_challenge_question(ChallengeQuestionRequest(
            topic=room.get("topic") or room.get("name"),
            grade_level=grade_level or "Other",
        ))
        written = self.store.create(path, {
            "roomId": room_id,
            "question": generated.question,
            "createdAt": SERVER_TIMESTAMP,
        })
        if not written:
            logger.info("Challenge for %s on %s was stored concurrently, using stored question", room_id, date_key)
        return {"id": date_key, **self.store.get(path)}

    def submit_answer(self, room_id, user, answer, today=None):
        if not self._is_member(room_id, user["uid"]):
            raise NotFoundError("Join the room before answering its challenge.")
        date_key = _today_key(today)
        challenge = self.store.get(f"{ROOMS}/{room_id}/challenges/{date_key}")
        if challenge is None:
            raise NotFoundError("There is no challenge for today yet.")
        answers_path = f"{ROOMS}/{room_id}/challenges/{date_key}/answers"
        answer_path = f"{answers_path}/{user['uid']}"
        if self.store.exists(answer_path):
            raise ConflictError("You have already answered today's challenge.")

        evaluation = self.ai.evaluate_challenge_answer(ChallengeAnswerRequest(
            question=challenge["question"],
            answer=answer,
        ))
        record = {
            "challengeId": date_key,
            "userId": user["uid"],
            "answer": answer,
            "isCorrect": evaluation.is_correct,
            "feedback": evaluation.feedback,
            "submittedAt": SERVER_TIMESTAMP,
        }
        if not self.store.create(answer_path, record):
            raise ConflictError("You have already answered today's challenge.")
        return {"id": user["uid"], **self.store.get(answer_path)}

    def answers(self, room_id, today=None):
        date_key = _today_key(today)
        return self.store.list(f"{ROOMS}/{room_id}/challenges/{date_key}/answers", order_by="submittedAt")
