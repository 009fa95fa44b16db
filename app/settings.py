from dotenv import find_dotenv, load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv(find_dotenv(), override=False)


class Settings(BaseSettings):
    PROJECT_NAME: str = "repvoice"
    REGION: str = "eu-west-2"
    ENV: str = "dev"
    LOG_LEVEL: str = "DEBUG"
    model_config = SettingsConfigDict(env_file=None)

    # ──────────────────── Storage ─────────────────────

    DDB_TABLE_NAME: str = "repvoice-dev-table"
    DDB_EMAIL_INDEX: str = "email-index"
    AUDIO_BUCKET: str = "repvoice-dev-workouts-audio"

    # ──────────────────── Auth ─────────────────────

    DISABLE_AUTH_FOR_LOCAL_DEV: bool = False
    DEV_USER_SUB: str | None = None

    COGNITO_AUDIENCE: str = ""
    COGNITO_ISSUER_URL: str = ""
    COGNITO_USER_POOL_ID: str = ""

    # ──────────────────── OpenAI ─────────────────────

    OPENAI_API_KEY: str = ""
    TRANSCRIPTION_MODEL: str = "whisper-1"
    EXTRACTION_MODEL: str = "gpt-4o-mini"
    EXTRACTION_TEMPERATURE: float = 0.3
    EXTRACTION_MAX_TOKENS: int = 1000

    # Transcripts shorter than this (after strip) are treated as empty
    MIN_TRANSCRIPT_LENGTH: int = 5

    # ──────────────────── Accounts ─────────────────────

    ADMIN_EMAILS: tuple[str, ...] = ()
    PRO_GIFT_MONTHS: int = 1
    PRO_GIFT_MESSAGE: str = "You have been gifted Pro for 1 month. Congratulations!"
    ACCOUNT_ERASE_ATTEMPTS: int = 3
    BLOCK_REASON: str = "AI misuse - exceeded failed voice recording attempts"

    def is_admin(self, email: str | None) -> bool:
        if not email:
            return False
        return email.strip().lower() in {e.strip().lower() for e in self.ADMIN_EMAILS}

    # ──────────────────── CORS ─────────────────────

    CORS_ALLOW_ORIGINS: tuple[str, ...] = ("*",)
    CORS_ALLOW_HEADERS: tuple[str, ...] = (
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    )

    # ──────────────────── Rate limiting ─────────────────────
    RATE_LIMIT_ENABLED: bool = True

    RATE_LIMIT_READ_PER_MIN: int = 120
    RATE_LIMIT_WRITE_PER_MIN: int = 30
    RATE_LIMIT_AI_PER_MIN: int = 6

    RATE_LIMIT_TTL_SECONDS: int = 600

    # Paths that hit the transcription / extraction models
    RATE_LIMIT_AI_PATHS: tuple[str, ...] = ("/process-workout",)

    # Prefixes that should never be rate limited
    RATE_LIMIT_EXCLUDED_PREFIXES: tuple[str, ...] = (
        "/healthz",
        "/favicon.ico",
    )


settings = Settings()
