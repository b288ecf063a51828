import logging
import concurrent.futures

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from studymate.errors import MissingInputError, ProviderError, ResultValidationError, StudyMateError
from studymate.services import prompts, schemas
from studymate.services.normalizers import (
    normalize_essay_feedback,
    normalize_exam_readiness,
    normalize_flashcards,
    normalize_quiz,
    normalize_study_plan,
    parse_reply,
    passthrough,
    sanitize_reply,
)
from studymate.utils.helpers import _extract_pdf_text, _image_data_url

logger = logging.getLogger(__name__)

FALLBACK_NUDGE = "The secret to getting ahead is getting started."


class AIService:
    """
    Runs the AI flows: build prompts, call the model, then sanitize, parse,
    normalize and validate the reply. Every flow is one round trip with no retry.
    """

    def __init__(self, cfg, client=None):
        self.config = cfg
        self._client = client
        self.executor = concurrent.futures.ThreadPoolExecutor(max_workers=4)

    @property
    def client(self):
        if self._client is None:
            if not self.config.GROQ_API_KEY:
                raise ProviderError("groq_api_key_missing")
            self._client = OpenAI(
                base_url=self.config.GROQ_BASE_URL,
                api_key=self.config.GROQ_API_KEY,
            )
        return self._client

    def _chat_completion(self, model, messages, temperature=None, max_tokens=None):
        kwargs = {
            "model": model,
            "messages": messages,
            "response_format": {"type": "json_object"},
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        fut = self.executor.submit(self.client.chat.completions.create, **kwargs)
        try:
            return fut.result(timeout=self.config.LLM_TIMEOUT_S)
        except concurrent.futures.TimeoutError:
            fut.cancel()
            raise ProviderError(f"model call to {model} timed out after {self.config.LLM_TIMEOUT_S}s")

    def _run_flow(self, feature, model, system_prompt, user_content, schema,
                  normalize=passthrough, temperature=None, max_tokens=None, empty="{}"):
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        response = self._chat_completion(model, messages, temperature=temperature, max_tokens=max_tokens)
        content = sanitize_reply(response.choices[0].message.content, empty=empty)
        parsed = parse_reply(content, feature)
        candidate = normalize(parsed)
        try:
            return schema.model_validate(candidate)
        except ValidationError as e:
            logger.warning("Schema validation failed for %s: %s", feature, e)
            raise ResultValidationError(feature, _describe(e))

    def analyze_essay(self, req):
        if not req.text.strip():
            raise MissingInputError("Please provide essay text to review.")
        system_prompt, user_prompt = prompts.essay_feedback_prompts(req)
        return self._run_flow(
            "essay feedback",
            self.config.ESSAY_MODEL,
            system_prompt,
            user_prompt,
            schemas.EssayFeedback,
            normalize=normalize_essay_feedback,
            temperature=0.3,
        )

    def generate_flashcards(self, req):
        source_text = (req.text or "").strip()
        if req.pdf_data:
            source_text = _extract_pdf_text(req.pdf_data)
        elif req.image_data:
            return self._generate_flashcards_from_image(req.image_data)

        if not source_text:
            raise MissingInputError("No valid text extracted. Please provide text, a PDF or an image.")

        system_prompt, user_prompt = prompts.flashcard_prompts(source_text)
        return self._run_flow(
            "flashcards",
            self.config.FLASHCARD_MODEL,
            system_prompt,
            user_prompt,
            schemas.FlashcardSet,
            normalize=normalize_flashcards,
            temperature=0.3,
            max_tokens=1200,
            empty='{"flashcards": []}',
        )

    def _generate_flashcards_from_image(self, image_data):
        system_prompt, user_text = prompts.flashcard_image_prompt()
        content = [
            {"type": "text", "text": user_text},
            {"type": "image_url", "image_url": {"url": _image_data_url(image_data)}},
        ]
        return self._run_flow(
            "flashcards",
            self.config.FLASHCARD_VISION_MODEL,
            system_prompt,
            content,
            schemas.FlashcardSet,
            normalize=normalize_flashcards,
            temperature=0.3,
            max_tokens=1200,
            empty='{"flashcards": []}',
        )

    def generate_quiz(self, req):
        system_prompt, user_prompt = prompts.quiz_prompts(req)
        return self._run_flow(
            "quiz",
            self.config.QUIZ_MODEL,
            system_prompt,
            user_prompt,
            schemas.Quiz,
            normalize=normalize_quiz,
            temperature=0.6,
            empty='{"questions": []}',
        )

    def generate_study_plan(self, req):
        system_prompt, user_prompt = prompts.study_plan_prompts(req)
        return self._run_flow(
            "study plan",
            self.config.STUDY_PLAN_MODEL,
            system_prompt,
            user_prompt,
            schemas.StudyPlan,
            normalize=normalize_study_plan,
            temperature=0.5,
        )

    def calculate_exam_readiness(self, req):
        system_prompt, user_prompt = prompts.exam_readiness_prompts(req)
        return self._run_flow(
            "readiness score",
            self.config.READINESS_MODEL,
            system_prompt,
            user_prompt,
            schemas.ExamReadiness,
            normalize=normalize_exam_readiness,
            temperature=0.5,
        )

    def generate_challenge_question(self, req):
        system_prompt, user_prompt = prompts.challenge_question_prompts(req)
        return self._run_flow(
            "challenge question",
            self.config.CHALLENGE_MODEL,
            system_prompt,
            user_prompt,
            schemas.ChallengeQuestion,
            temperature=0.8,
        )

    def evaluate_challenge_answer(self, req):
        system_prompt, user_prompt = prompts.challenge_answer_prompts(req)
        return self._run_flow(
            "answer evaluation",
            self.config.CHALLENGE_MODEL,
            system_prompt,
            user_prompt,
            schemas.ChallengeEvaluation,
            temperature=0.3,
        )

    def generate_motivation_nudge(self):
        system_prompt, user_prompt = prompts.motivation_prompts()
        try:
            return self._run_flow(
                "motivation nudge",
                self.config.MOTIVATION_MODEL,
                system_prompt,
                user_prompt,
                schemas.MotivationNudge,
                temperature=0.8,
            )
        except (StudyMateError, OpenAIError):
            logger.exception("Error generating motivation nudge")
            return schemas.MotivationNudge(message=FALLBACK_NUDGE)

    def shutdown(self):
        self.executor.shutdown(wait=False, cancel_futures=True)


def _describe(error):
    parts = []
    for err in error.errors()[:3]:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return "; ".join(parts)
