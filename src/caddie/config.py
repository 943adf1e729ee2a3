"""Configuration management with environment variables."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# LLM configuration (OpenAI-compatible chat completions, optionally via a gateway)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
GATEWAY_BASE_URL = os.getenv("GATEWAY_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1")
LLM_TIMEOUT = 60.0

# Search configuration
SEARCH_BASE_URL = os.getenv("SEARCH_BASE_URL", "https://www.google.com/search")

# HTTP client configuration
USER_AGENT = os.getenv(
    "USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
HTTP_TIMEOUT = 30.0
HTTP_MAX_REDIRECTS = 10

# Browser (Playwright) configuration, all timeouts in milliseconds
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "true").lower() != "false"
BROWSER_TIMEOUT = 20000
ENTRY_POINT_WAIT_TIMEOUT = 5000
CLICK_NAVIGATION_TIMEOUT = 10000
DATE_INPUT_WAIT_TIMEOUT = 3000
DATE_SETTLE_SECONDS = 2.0

# Cache configuration
CACHE_DIR = Path(os.getenv("CACHE_DIR", ".cache"))

# Search cache TTL (seconds)
SEARCH_CACHE_TTL = 3600  # 1 hour

# HTTP boundary
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://localhost:8788,https://mulls.io,https://agents.mulls.io,https://dash.mulls.io",
    ).split(",")
    if origin.strip()
]

# Agent configuration
DEFAULT_MAX_STEPS = 10
SYSTEM_PROMPT = os.getenv(
    "SYSTEM_PROMPT",
    "You are a helpful assistant that can do various tasks. "
    "You can look up golf course websites and tee time booking pages, "
    "schedule tasks for later and browse web pages.",
)
