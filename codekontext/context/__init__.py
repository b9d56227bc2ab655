"""Context builder: selects and packs project files into a bounded prompt."""

from codekontext.context.builder import (
    ContextConfig,
    ContextFile,
    ContextResult,
    build_context,
    estimate_tokens,
)
from codekontext.context.scoring import ScoringWeights, extract_file_references

__all__ = [
    "ContextConfig",
    "ContextFile",
    "ContextResult",
    "ScoringWeights",
    "build_context",
    "estimate_tokens",
    "extract_file_references",
]
