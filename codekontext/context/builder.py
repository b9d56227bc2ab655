"""Context builder: file set + chat history → bounded system prompt.

Files are scored, sorted, capped, and then packed greedily in score order
against a token budget. A file that does not fit is downgraded to a one-line
listing if that still fits, otherwise dropped; later files are still tried.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field

from codekontext.context.prompts import (
    FILES_SECTION_HEADER,
    TRUNCATION_NOTE,
    build_preamble,
    detect_project_type,
)
from codekontext.context.scoring import (
    DEFAULT_WEIGHTS,
    ScoringWeights,
    recent_message_text,
    score_file,
)
from codekontext.models import FileRecord, Message

logger = logging.getLogger(__name__)

# Fixed approximation; kept crude on purpose so truncation is reproducible.
CHARS_PER_TOKEN = 4


@dataclass
class ContextConfig:
    max_context_tokens: int = 100_000
    reserve_tokens_for_response: int = 4_000
    include_file_contents: bool = True
    prioritize_active_file: bool = True
    prioritize_recent_files: bool = True  # accepted for compatibility, no separate heuristic
    max_files_in_context: int = 50
    weights: ScoringWeights = field(default_factory=lambda: DEFAULT_WEIGHTS)

    @property
    def available_tokens(self) -> int:
        return self.max_context_tokens - self.reserve_tokens_for_response


@dataclass
class ContextFile:
    path: str
    content: str
    language: str
    relevance_score: int
    token_count: int
    content_omitted: bool = False

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "content": self.content,
            "language": self.language,
            "relevanceScore": self.relevance_score,
            "tokenCount": self.token_count,
            "contentOmitted": self.content_omitted,
        }


@dataclass
class ContextResult:
    files: list[ContextFile]
    system_prompt: str
    total_tokens: int
    truncated: bool
    project_type: str = ""

    def to_dict(self) -> dict:
        return {
            "files": [f.to_dict() for f in self.files],
            "systemPrompt": self.system_prompt,
            "totalTokens": self.total_tokens,
            "truncated": self.truncated,
            "projectType": self.project_type,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def estimate_tokens(text: str) -> int:
    """Approximate token count: ceil(chars / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _full_entry(file: ContextFile) -> str:
    return f"\n\n### {file.path}\n```{file.language}\n{file.content}\n```"


def _listing_entry(file: ContextFile) -> str:
    return f"\n- {file.path} ({file.language})"


def _placeholder_entry(file: ContextFile) -> str:
    # Costed on this short form; the rendered line is longer. Keep both as they are.
    return f"\n- {file.path} ({file.language}) [content omitted]"


def rank_files(
    files: Iterable[FileRecord],
    messages: Sequence[Message],
    active_file_path: str | None,
    config: ContextConfig,
) -> list[ContextFile]:
    """Score every file and return them sorted by score, capped to the file limit.

    The sort is stable, so equal scores keep their input order.
    """
    weights = config.weights
    recent_text = recent_message_text(messages, weights.recent_message_window)

    scored = [
        ContextFile(
            path=f.path,
            content=f.content or "",
            language=f.language or "plaintext",
            relevance_score=score_file(
                f,
                active_file_path,
                recent_text,
                weights=weights,
                prioritize_active_file=config.prioritize_active_file,
            ),
            token_count=estimate_tokens(f.content or ""),
        )
        for f in files
    ]
    scored.sort(key=lambda cf: cf.relevance_score, reverse=True)
    return scored[: max(config.max_files_in_context, 0)]


def build_context(
    files: Iterable[FileRecord] | Mapping[str, FileRecord],
    messages: Sequence[Message] = (),
    active_file_path: str | None = None,
    config: ContextConfig | None = None,
) -> ContextResult:
    """Build a token-bounded system prompt from a project's files."""
    config = config or ContextConfig()
    all_files = list(files.values()) if isinstance(files, Mapping) else list(files)
    messages = list(messages)

    ranked = rank_files(all_files, messages, active_file_path, config)

    # Project type looks at the whole set, not the capped list
    project_type = detect_project_type(all_files)
    preamble = build_preamble(project_type)

    available_tokens = config.available_tokens
    used_tokens = estimate_tokens(preamble)
    included: list[ContextFile] = []
    truncated = False

    for cf in ranked:
        entry = _full_entry(cf) if config.include_file_contents else _listing_entry(cf)
        cost = estimate_tokens(entry)

        if used_tokens + cost <= available_tokens:
            used_tokens += cost
            cf.token_count = cost
            included.append(cf)
            continue

        truncated = True
        if not config.include_file_contents:
            continue

        placeholder_cost = estimate_tokens(_placeholder_entry(cf))
        if used_tokens + placeholder_cost <= available_tokens:
            used_tokens += placeholder_cost
            cf.content = ""
            cf.token_count = placeholder_cost
            cf.content_omitted = True
            included.append(cf)

    prompt = preamble + FILES_SECTION_HEADER + _render_files(included, config.include_file_contents)
    if truncated:
        prompt += TRUNCATION_NOTE

    logger.debug(
        f"Packed {len(included)}/{len(ranked)} files ({len(all_files)} total) "
        f"into {used_tokens}/{available_tokens} tokens, truncated={truncated}"
    )

    return ContextResult(
        files=included,
        system_prompt=prompt,
        total_tokens=used_tokens,
        truncated=truncated,
        project_type=project_type,
    )


def _render_files(files: list[ContextFile], include_contents: bool) -> str:
    if not include_contents:
        return "\n".join(f"- {f.path} ({f.language})" for f in files)

    parts: list[str] = []
    for f in files:
        if f.content_omitted:
            parts.append(f"- {f.path} ({f.language}) [content omitted due to context limits]\n")
        else:
            parts.append(f"\n### {f.path}\n```{f.language}\n{f.content}\n```\n")
    return "".join(parts)


def context_result_summary(result: ContextResult) -> dict:
    """Compact view of a result without file contents, for logs and previews."""
    data = asdict(result)
    data.pop("system_prompt")
    data["files"] = [
        {"path": f.path, "score": f.relevance_score, "tokens": f.token_count, "omitted": f.content_omitted}
        for f in result.files
    ]
    return data
