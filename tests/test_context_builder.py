"""Tests for codekontext.context.builder and prompt selection."""

from __future__ import annotations

import json

from codekontext.context.builder import (
    ContextConfig,
    build_context,
    context_result_summary,
    estimate_tokens,
    rank_files,
)
from codekontext.context.prompts import (
    FILES_SECTION_HEADER,
    PROJECT_TYPE_FRAMEWORK,
    PROJECT_TYPE_VANILLA,
    TRUNCATION_NOTE,
    build_preamble,
    detect_project_type,
)
from codekontext.models import FileRecord, Message


def _preamble_tokens(project_type: str = PROJECT_TYPE_FRAMEWORK) -> int:
    return estimate_tokens(build_preamble(project_type))


class TestEstimateTokens:
    def test_rounds_up(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abc") == 1
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2


class TestDetectProjectType:
    def test_vanilla(self, vanilla_project):
        assert detect_project_type(vanilla_project) == PROJECT_TYPE_VANILLA

    def test_package_json_means_framework(self, vanilla_project):
        files = vanilla_project + [FileRecord("package.json", "{}")]
        assert detect_project_type(files) == PROJECT_TYPE_FRAMEWORK

    def test_tsx_means_framework(self, vanilla_project):
        files = vanilla_project + [FileRecord("src/App.tsx", "")]
        assert detect_project_type(files) == PROJECT_TYPE_FRAMEWORK

    def test_no_index_html_means_framework(self):
        assert detect_project_type([FileRecord("script.js", "")]) == PROJECT_TYPE_FRAMEWORK

    def test_preambles_carry_action_format(self):
        for project_type, example in [(PROJECT_TYPE_VANILLA, "index.html"), (PROJECT_TYPE_FRAMEWORK, "app/page.tsx")]:
            preamble = build_preamble(project_type)
            assert '"create_or_update_file"' in preamble
            assert '"delete_file"' in preamble
            assert f'"path": "{example}"' in preamble


class TestRankFiles:
    def test_active_file_ranks_first(self, next_project):
        ranked = rank_files(next_project, [], "lib/utils.ts", ContextConfig())
        assert ranked[0].path == "lib/utils.ts"

    def test_mentioned_file_beats_plain_source(self, next_project, messages):
        ranked = rank_files(next_project, messages, None, ContextConfig())
        paths = [cf.path for cf in ranked]
        assert paths.index("components/Hero.tsx") < paths.index("lib/utils.ts")

    def test_ties_keep_input_order(self):
        files = [FileRecord("notes.txt"), FileRecord("README.md"), FileRecord("LICENSE")]
        ranked = rank_files(files, [], None, ContextConfig())
        assert [cf.path for cf in ranked] == ["notes.txt", "README.md", "LICENSE"]

    def test_capped_to_max_files(self, next_project):
        ranked = rank_files(next_project, [], None, ContextConfig(max_files_in_context=2))
        assert len(ranked) == 2


class TestBuildContext:
    def test_everything_fits(self, next_project):
        result = build_context(next_project)
        assert len(result.files) == len(next_project)
        assert not result.truncated
        assert result.project_type == PROJECT_TYPE_FRAMEWORK
        assert FILES_SECTION_HEADER in result.system_prompt
        assert TRUNCATION_NOTE not in result.system_prompt
        assert "### app/page.tsx\n```typescript\n" in result.system_prompt

    def test_total_tokens_counts_preamble_and_entries(self, next_project):
        result = build_context(next_project)
        assert result.total_tokens == _preamble_tokens() + sum(f.token_count for f in result.files)

    def test_file_token_count_is_entry_cost(self):
        f = FileRecord("lib/a.ts", "export const a = 1;", "typescript")
        result = build_context([f])
        expected = estimate_tokens(f"\n\n### lib/a.ts\n```typescript\n{f.content}\n```")
        assert result.files[0].token_count == expected

    def test_budget_respected(self, next_project):
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 60, reserve_tokens_for_response=20)
        result = build_context(next_project, config=config)
        assert result.total_tokens <= config.available_tokens
        assert result.truncated

    def test_oversized_file_becomes_placeholder(self):
        files = [
            FileRecord("app/page.tsx", "x" * 4000, "typescript"),
            FileRecord("lib/small.ts", "ok", "typescript"),
        ]
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 110, reserve_tokens_for_response=10)
        result = build_context(files, active_file_path="app/page.tsx", config=config)

        assert [f.path for f in result.files] == ["app/page.tsx", "lib/small.ts"]
        big, small = result.files
        assert big.content_omitted
        assert big.content == ""
        assert not small.content_omitted
        assert result.truncated
        assert "- app/page.tsx (typescript) [content omitted due to context limits]" in result.system_prompt
        assert result.system_prompt.endswith(TRUNCATION_NOTE)
        assert result.total_tokens <= config.available_tokens

    def test_placeholder_cost_uses_short_form(self):
        files = [FileRecord("app/page.tsx", "x" * 4000, "typescript")]
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 50, reserve_tokens_for_response=0)
        result = build_context(files, config=config)
        placeholder_cost = estimate_tokens("\n- app/page.tsx (typescript) [content omitted]")
        assert result.files[0].token_count == placeholder_cost
        assert result.total_tokens == _preamble_tokens() + placeholder_cost

    def test_nothing_fits(self):
        files = [FileRecord("app/page.tsx", "x" * 400, "typescript")]
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 1, reserve_tokens_for_response=0)
        result = build_context(files, config=config)
        assert result.files == []
        assert result.truncated
        assert result.total_tokens == _preamble_tokens()

    def test_preamble_alone_over_budget(self, next_project):
        config = ContextConfig(max_context_tokens=10, reserve_tokens_for_response=0)
        result = build_context(next_project, config=config)
        assert result.files == []
        assert result.truncated
        assert result.system_prompt.startswith(build_preamble(PROJECT_TYPE_FRAMEWORK))

    def test_later_smaller_files_still_packed(self):
        files = [
            FileRecord("app/page.tsx", "x" * 4000, "typescript"),
            FileRecord("notes.txt", "tiny", "plaintext"),
        ]
        # Room for the small file but not even the big file's placeholder
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 11, reserve_tokens_for_response=0)
        result = build_context(files, config=config)
        assert [f.path for f in result.files] == ["notes.txt"]
        assert result.truncated

    def test_empty_file_is_not_marked_omitted(self):
        result = build_context([FileRecord("lib/empty.ts", "", "typescript")])
        assert not result.files[0].content_omitted
        assert "### lib/empty.ts\n```typescript\n\n```" in result.system_prompt

    def test_vanilla_project_prompt(self, vanilla_project):
        result = build_context(vanilla_project)
        assert result.project_type == PROJECT_TYPE_VANILLA
        assert "Vanilla JavaScript" in result.system_prompt
        assert "Next.js" not in result.system_prompt

    def test_detection_ignores_file_cap(self, vanilla_project):
        # The cap hides index.html from the packed list but not from detection
        files = [FileRecord("src/a.js", "a"), FileRecord("src/b.js", "b")] + vanilla_project
        result = build_context(files, config=ContextConfig(max_files_in_context=2))
        assert {f.path for f in result.files} == {"src/a.js", "src/b.js"}
        assert result.project_type == PROJECT_TYPE_VANILLA

    def test_listing_mode(self, next_project):
        config = ContextConfig(include_file_contents=False)
        result = build_context(next_project, config=config)
        assert "- app/page.tsx (typescript)" in result.system_prompt
        assert "```typescript" not in result.system_prompt.split(FILES_SECTION_HEADER)[1]

    def test_listing_mode_drops_without_placeholder(self, next_project):
        config = ContextConfig(
            include_file_contents=False,
            max_context_tokens=_preamble_tokens() + 12,
            reserve_tokens_for_response=0,
        )
        result = build_context(next_project, config=config)
        assert result.truncated
        assert all(not f.content_omitted for f in result.files)
        assert len(result.files) < len(next_project)

    def test_accepts_path_mapping(self, next_project):
        mapping = {f.path: f for f in next_project}
        assert build_context(mapping).system_prompt == build_context(next_project).system_prompt

    def test_deterministic(self, next_project, messages):
        config = ContextConfig(max_context_tokens=_preamble_tokens() + 80, reserve_tokens_for_response=0)
        first = build_context(next_project, messages, "app/page.tsx", config)
        second = build_context(next_project, messages, "app/page.tsx", config)
        assert first.system_prompt == second.system_prompt
        assert first.to_json() == second.to_json()

    def test_does_not_mutate_input(self, next_project):
        before = list(next_project)
        build_context(next_project, config=ContextConfig(max_context_tokens=_preamble_tokens() + 5,
                                                         reserve_tokens_for_response=0))
        assert next_project == before


class TestSerialization:
    def test_to_dict_uses_camel_case(self, next_project):
        data = build_context(next_project[:1]).to_dict()
        assert set(data) == {"files", "systemPrompt", "totalTokens", "truncated", "projectType"}
        assert set(data["files"][0]) == {
            "path", "content", "language", "relevanceScore", "tokenCount", "contentOmitted",
        }

    def test_to_json_is_valid(self, next_project):
        parsed = json.loads(build_context(next_project).to_json())
        assert parsed["truncated"] is False

    def test_summary_drops_contents(self, next_project):
        summary = context_result_summary(build_context(next_project, [Message("user", "hi")]))
        assert "system_prompt" not in summary
        assert set(summary["files"][0]) == {"path", "score", "tokens", "omitted"}
        assert summary["project_type"] == PROJECT_TYPE_FRAMEWORK
