"""Configuration loading for codekontext.

Config sources (in priority order):
1. Explicit CLI options / function arguments
2. Environment variables (CODEKONTEXT_MAX_CONTEXT_TOKENS, etc.)
3. .env file in current directory
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from codekontext.context.builder import ContextConfig

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTEXT_TOKENS = 100_000
DEFAULT_RESERVE_TOKENS = 4_000
DEFAULT_MAX_FILES = 50
DEFAULT_LOG_PATH = Path("codekontext-activity.jsonl")
DEFAULT_LOG_LEVEL = "WARNING"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "")
    if not raw:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


@dataclass
class Config:
    max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS
    reserve_tokens: int = DEFAULT_RESERVE_TOKENS
    max_files: int = DEFAULT_MAX_FILES
    include_contents: bool = True
    log_path: Path = DEFAULT_LOG_PATH
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def load(cls) -> Config:
        return cls(
            max_context_tokens=_env_int("CODEKONTEXT_MAX_CONTEXT_TOKENS", DEFAULT_MAX_CONTEXT_TOKENS),
            reserve_tokens=_env_int("CODEKONTEXT_RESERVE_TOKENS", DEFAULT_RESERVE_TOKENS),
            max_files=_env_int("CODEKONTEXT_MAX_FILES", DEFAULT_MAX_FILES),
            include_contents=_env_bool("CODEKONTEXT_INCLUDE_CONTENTS", True),
            log_path=Path(os.getenv("CODEKONTEXT_LOG_PATH", str(DEFAULT_LOG_PATH))),
            log_level=os.getenv("CODEKONTEXT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

    def validate(self) -> list[str]:
        """Return a list of config issues."""
        issues = []
        if self.max_context_tokens <= 0:
            issues.append("Context budget must be positive (CODEKONTEXT_MAX_CONTEXT_TOKENS)")
        if self.reserve_tokens < 0:
            issues.append("Response reserve cannot be negative (CODEKONTEXT_RESERVE_TOKENS)")
        elif self.reserve_tokens >= self.max_context_tokens:
            issues.append("Response reserve must be smaller than the context budget (CODEKONTEXT_RESERVE_TOKENS)")
        if self.max_files <= 0:
            issues.append("File cap must be positive (CODEKONTEXT_MAX_FILES)")
        return issues

    def context_config(self) -> ContextConfig:
        return ContextConfig(
            max_context_tokens=self.max_context_tokens,
            reserve_tokens_for_response=self.reserve_tokens,
            include_file_contents=self.include_contents,
            max_files_in_context=self.max_files,
        )
