import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    APP_NAME = data.get("APP_NAME", "tx-gateway")
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./gateway.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Tokens and sessions
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    ACCESS_TOKEN_MINUTES = int(data.get("ACCESS_TOKEN_MINUTES", 15))
    SESSION_TTL_DAYS = int(data.get("SESSION_TTL_DAYS", 30))
    SESSION_TABLE = data.get("SESSION_TABLE", "sessions")
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # Profiles: callers without a session act as PUBLIC_PROFILE_ID (0 disables)
    PUBLIC_PROFILE_ID = int(data.get("PUBLIC_PROFILE_ID", 0))
    DEFAULT_PROFILE_ID = int(data.get("DEFAULT_PROFILE_ID", 1))

    REQUIRE_EMAIL_VERIFICATION = bool(data.get("REQUIRE_EMAIL_VERIFICATION", False))
    LOGIN_TWO_STEP_NEW_DEVICE = bool(data.get("LOGIN_TWO_STEP_NEW_DEVICE", False))

    # Challenge policy
    PASSWORD_RESET_TTL_SECONDS = int(data.get("PASSWORD_RESET_TTL_SECONDS", 900))
    PASSWORD_RESET_MAX_ATTEMPTS = int(data.get("PASSWORD_RESET_MAX_ATTEMPTS", 5))
    EMAIL_VERIFICATION_TTL_SECONDS = int(data.get("EMAIL_VERIFICATION_TTL_SECONDS", 900))
    EMAIL_VERIFICATION_MAX_ATTEMPTS = int(data.get("EMAIL_VERIFICATION_MAX_ATTEMPTS", 5))
    LOGIN_CHALLENGE_TTL_SECONDS = int(data.get("LOGIN_CHALLENGE_TTL_SECONDS", 600))
    LOGIN_CHALLENGE_MAX_ATTEMPTS = int(data.get("LOGIN_CHALLENGE_MAX_ATTEMPTS", 5))
    OTP_CODE_LENGTH = int(data.get("OTP_CODE_LENGTH", 6))
    OTP_CODE_CHARSET = str(data.get("OTP_CODE_CHARSET", "0123456789"))
    CHALLENGE_TOKEN_BYTES = int(data.get("CHALLENGE_TOKEN_BYTES", 32))

    STORE_TIMEOUT_SECONDS = float(data.get("STORE_TIMEOUT_SECONDS", 10))

    # Rate limits: requests per RATE_LIMIT_WINDOW_SECONDS, counted per process
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMIT_WINDOW_SECONDS = int(data.get("RATE_LIMIT_WINDOW_SECONDS", 60))
    DISPATCH_RATE_LIMIT = int(data.get("DISPATCH_RATE_LIMIT", 120))
    LOGIN_RATE_LIMIT = int(data.get("LOGIN_RATE_LIMIT", 10))
    # Overrides per public Auth operation, e.g. {requestPasswordReset: 3}
    AUTH_RATE_LIMITS = dict(data.get("AUTH_RATE_LIMITS") or {})
