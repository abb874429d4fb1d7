import os
import dotenv
import logging

dotenv.load_dotenv()

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")
GITHUB_PRIVATE_KEY = os.environ.get("GITHUB_PRIVATE_KEY")
GITHUB_APP_ID = os.environ.get("GITHUB_APP_ID")
if GITHUB_APP_ID is not None:
    GITHUB_APP_ID = int(GITHUB_APP_ID)

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "WARNING"))

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")
ALERT_LEVEL = logging.getLevelName(os.environ.get("ALERT_LEVEL", "WARNING"))

POLICY_FILE = os.environ.get("POLICY_FILE")

REPO_POLICY_PATH = os.environ.get("REPO_POLICY_PATH", ".branchsource.yml")

ACCESS_TOKEN_TTL = float(os.environ.get("ACCESS_TOKEN_TTL", 300))

HTTP_CACHE_SIZE = int(os.environ.get("HTTP_CACHE_SIZE", 500))

PUSH_GATEWAY = os.environ.get("PUSH_GATEWAY")
