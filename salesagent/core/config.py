import os
from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sales_agent.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

# Completion service
COMPLETION_PROVIDER = os.getenv("COMPLETION_PROVIDER", "mock").strip().lower()
COMPLETION_API_URL = os.getenv(
    "COMPLETION_API_URL", "https://api.openai.com/v1/chat/completions"
).strip()
COMPLETION_API_KEY = os.getenv("COMPLETION_API_KEY", "").strip()
COMPLETION_MODEL = os.getenv("COMPLETION_MODEL", "gpt-4o-mini").strip()
COMPLETION_VISION_MODEL = os.getenv("COMPLETION_VISION_MODEL", "gpt-4o").strip()
COMPLETION_TIMEOUT_SECONDS = float(os.getenv("COMPLETION_TIMEOUT_SECONDS", "20"))
COMPLETION_MAX_RETRIES = int(os.getenv("COMPLETION_MAX_RETRIES", "3"))
COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "300"))
COMPLETION_TEMPERATURE = float(os.getenv("COMPLETION_TEMPERATURE", "0.7"))

# Conversation memory
HISTORY_MAX_LENGTH = int(os.getenv("HISTORY_MAX_LENGTH", "15"))
COMPLETION_HISTORY_TURNS = 10

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

# Internal endpoints (metrics); empty means open in dev and closed elsewhere
INTERNAL_METRICS_TOKEN = os.getenv("INTERNAL_METRICS_TOKEN", "").strip()
