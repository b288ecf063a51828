import os
import re
import configparser

class Config:
    def __init__(self, root_path, overrides=None):
        self.root_path = root_path
        self._overrides = dict(overrides or {})
        self._cfg = configparser.ConfigParser()
        self._cfg.read(os.path.join(root_path, "config.ini"), encoding="utf-8")

        # Flask Config
        self.SECRET_KEY = self._get("SECRET_KEY", "flask", "secret_key", "dev-secret-change-me")
        self.MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max, PDFs and images arrive base64 encoded
        self.JSON_AS_ASCII = False
        self.PORT = int(self._get("PORT", "flask", "port", "7860"))

        # Groq (OpenAI-compatible) Config
        self.GROQ_API_KEY = self._get("GROQ_API_KEY", "groq", "api_key", "")
        self.GROQ_BASE_URL = self._get("GROQ_BASE_URL", "groq", "base_url", "https://api.groq.com/openai/v1")
        self.LLM_TIMEOUT_S = float(self._get("LLM_TIMEOUT_S", "groq", "timeout_s", "60"))

        default_model = self._normalize_model_id(self._get("MODEL_ID", "models", "default", "llama-3.3-70b-versatile"))
        self.ESSAY_MODEL = self._model("ESSAY_MODEL", "essay", default_model)
        self.FLASHCARD_MODEL = self._model("FLASHCARD_MODEL", "flashcards", default_model)
        self.FLASHCARD_VISION_MODEL = self._model("FLASHCARD_VISION_MODEL", "flashcards_vision", "meta-llama/llama-4-scout-17b-16e-instruct")
        self.QUIZ_MODEL = self._model("QUIZ_MODEL", "quiz", default_model)
        self.STUDY_PLAN_MODEL = self._model("STUDY_PLAN_MODEL", "study_plan", default_model)
        self.READINESS_MODEL = self._model("READINESS_MODEL", "readiness", default_model)
        self.CHALLENGE_MODEL = self._model("CHALLENGE_MODEL", "challenge", default_model)
        self.MOTIVATION_MODEL = self._model("MOTIVATION_MODEL", "motivation", "llama-3.1-8b-instant")

        # Data Store Paths
        self.DATA_DIR = self._get("DATA_DIR", "store", "data_dir", os.path.join(root_path, "data"))
        self.LOG_DIR = self._get("LOG_DIR", "logging", "log_dir", os.path.join(root_path, "logs"))

    def _get(self, env_key, section, option, fallback):
        if env_key in self._overrides:
            return self._overrides[env_key]
        return os.environ.get(env_key) or self._cfg.get(section, option, fallback=fallback)

    def _model(self, env_key, option, fallback):
        return self._normalize_model_id(self._get(env_key, "models", option, fallback))

    def _normalize_model_id(self, mid):
        return re.sub(r"\s+", "", str(mid or ""))

config = Config(os.getcwd())
