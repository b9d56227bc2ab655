"""codekontext: context packing, file-set diffing, and schema versioning for AI code generation."""

__version__ = "0.1.0"
