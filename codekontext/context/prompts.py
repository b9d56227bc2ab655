"""System prompt preambles and project type detection.

The preamble tells the downstream model to reply with a JSON block of file
actions. The wording is product copy; the action format is the contract the
response parser depends on.
"""

from __future__ import annotations

from collections.abc import Iterable

from codekontext.models import FileRecord

PROJECT_TYPE_VANILLA = "vanilla"
PROJECT_TYPE_FRAMEWORK = "framework"

FILES_SECTION_HEADER = "\n\n## PROJECT FILES\n"
TRUNCATION_NOTE = "\n\n*Note: Some files were omitted due to context length limits.*"

ACTIONS_FORMAT = """\
**REQUIRED FORMAT:**
```json
{
  "actions": [
    {
      "type": "create_or_update_file",
      "path": "{example_path}",
      "content": "COMPLETE working code here"
    },
    {
      "type": "delete_file",
      "path": "path/to/obsolete-file"
    }
  ],
  "explanation": "What you changed and why"
}
```"""

FRAMEWORK_PROMPT = """\
You are an expert full-stack developer helping build web applications. You MUST respond \
with actual code changes, not just acknowledgments.

## CRITICAL: ALWAYS OUTPUT JSON WITH CODE
Every response MUST include the JSON block with actual file changes. Do NOT just say \
you'll help - ACTUALLY DO THE WORK.

{actions_format}

**EXAMPLE USER REQUEST:** "Add a hero section"
**YOUR RESPONSE:** Brief explanation, then immediately the JSON block with the complete \
updated file content.

## TECHNOLOGY STACK
- Next.js 14 App Router
- TypeScript
- Tailwind CSS
- shadcn/ui components
- Lucide React icons

## RULES
1. Output COMPLETE file contents (never partial code)
2. NO "// rest of the code" placeholders
3. Use "use client" for components with hooks/events
4. Always include all imports
5. Use "delete_file" actions only for files that must be removed

Start coding immediately - analyze the request, write the code, output the JSON."""

VANILLA_PROMPT = """\
You are an expert front-end developer working on a plain HTML, CSS and JavaScript \
project with no build step. You MUST respond with actual code changes, not just \
acknowledgments.

## CRITICAL: ALWAYS OUTPUT JSON WITH CODE
Every response MUST include the JSON block with actual file changes.

{actions_format}

## TECHNOLOGY STACK
- Semantic HTML5 (index.html is the entry point)
- Modern CSS (custom properties, flexbox, grid)
- Vanilla JavaScript (ES modules, no frameworks, no bundler)

## RULES
1. Output COMPLETE file contents (never partial code)
2. NO "// rest of the code" placeholders
3. Do not introduce package.json, npm dependencies or TypeScript
4. Reference scripts and stylesheets with relative paths from index.html
5. Use "delete_file" actions only for files that must be removed

Start coding immediately - analyze the request, write the code, output the JSON."""


def detect_project_type(files: Iterable[FileRecord]) -> str:
    """Classify a file set as "vanilla" or "framework".

    Vanilla means an index.html is present with no package.json and no .tsx
    file anywhere in the set. Everything else is treated as a Next.js/React
    project.
    """
    has_index_html = False
    has_package_json = False
    has_tsx = False
    for f in files:
        name = f.path.rsplit("/", 1)[-1]
        if name == "index.html":
            has_index_html = True
        elif name == "package.json":
            has_package_json = True
        if f.path.endswith(".tsx"):
            has_tsx = True

    if has_index_html and not has_package_json and not has_tsx:
        return PROJECT_TYPE_VANILLA
    return PROJECT_TYPE_FRAMEWORK


def build_preamble(project_type: str) -> str:
    """Return the instructional preamble for a detected project type."""
    if project_type == PROJECT_TYPE_VANILLA:
        actions = ACTIONS_FORMAT.replace("{example_path}", "index.html")
        return VANILLA_PROMPT.format(actions_format=actions)
    actions = ACTIONS_FORMAT.replace("{example_path}", "app/page.tsx")
    return FRAMEWORK_PROMPT.format(actions_format=actions)
