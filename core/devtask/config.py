"""Configuration settings for DevTask."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Conversation memory
MAX_REFERENCE_ENTRIES = 10
MAX_CONTEXT_MESSAGES = 12
MAX_INTERACTIONS = 20

# File operations
DEFAULT_STRUCTURE_DEPTH = 3
TASKS_DIR = Path(".task") / "issues"

# Code execution
CODE_EXECUTION_TIMEOUT = 30

# Models
DEFAULT_OPENAI_MODEL = "gpt-4.1"
CLASSIFIER_TEMPERATURE = 0.1
CHAT_TEMPERATURE = 0.7
CODE_TEMPERATURE = 0.3

# Sessions
MAX_SESSIONS = 100

# Server
HOST = "127.0.0.1"
PORT = 7878

# API
API_PREFIX = "/api"

# GitHub
GITHUB_API_URL = "https://api.github.com"


def project_root() -> Path:
    """Root directory that file operations are confined to."""
    return Path(os.getenv("DEVTASK_PROJECT_ROOT") or os.getcwd()).resolve()


def openai_api_key() -> str | None:
    return os.getenv("OPENAI_API_KEY")


def openai_model() -> str:
    return os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL


def openai_base_url() -> str | None:
    return os.getenv("OPENAI_BASE_URL") or None


def github_settings() -> dict[str, str | None]:
    return {
        "token": os.getenv("GITHUB_TOKEN"),
        "owner": os.getenv("GITHUB_OWNER"),
        "repo": os.getenv("GITHUB_REPO"),
    }


def log_level() -> str:
    return (os.getenv("DEVTASK_LOG_LEVEL") or "INFO").upper()
