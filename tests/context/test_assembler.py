"""Tests for context/assembler.py."""

import pytest

from chat_context.config import ContextSettings
from chat_context.constants import DEFAULT_EXCLUDE_PATTERN, UNIT_TEST_EXCLUDE_PATTERN
from chat_context.context.assembler import ContextAssembler


def _names(messages):
    return [m.file.file_name for m in messages if m.speaker == "human"]


class TestDirectoryContext:
    @pytest.mark.asyncio
    async def test_listing_order_and_pairs(self, fake_workspace):
        ws = fake_workspace({"src/zeta.ts": "z", "src/alpha.ts": "a", "src/main.ts": "m"})
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "main.ts")
        assert _names(messages) == ["src/zeta.ts", "src/alpha.ts"]
        assert [m.speaker for m in messages] == ["human", "assistant"] * 2
        assert messages[0].text == "Codebase context from file path src/zeta.ts: z"
        assert messages[0].file.source == "file-scan"
        assert messages[0].file.uri == ws.uri("src/zeta.ts")

    @pytest.mark.asyncio
    async def test_companion_file_stops_scan(self, fake_workspace):
        ws = fake_workspace({
            "src/foo.test.ts": "t",
            "src/other.ts": "o",
            "src/foo.ts": "f",
        })
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "foo.ts")
        assert _names(messages) == ["src/foo.test.ts"]
        assert "src/other.ts" not in ws.reads

    @pytest.mark.asyncio
    async def test_suffix_companion_stops_scan(self, fake_workspace):
        ws = fake_workspace({"src/a.ts": "a", "src/use_foo": "u", "src/b.ts": "b"})
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "foo.ts")
        assert _names(messages) == ["src/a.ts", "src/use_foo"]

    @pytest.mark.asyncio
    async def test_size_cap_is_hard(self, fake_workspace):
        ws = fake_workspace(
            {"src/empty.ts": "", "src/big.ts": "b", "src/edge.ts": "e", "src/ok.ts": "k"},
            sizes={"src/big.ts": 1_000_001, "src/edge.ts": 1_000_000},
        )
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "main.ts")
        assert _names(messages) == ["src/edge.ts", "src/ok.ts"]
        assert "src/big.ts" not in ws.reads
        assert "src/empty.ts" not in ws.reads

    @pytest.mark.asyncio
    async def test_max_fragments(self, fake_workspace):
        ws = fake_workspace({f"src/{c}.ts": c for c in "abcdefg"})
        assembler = ContextAssembler(ws)
        messages = await assembler.build_directory_context(ws.uri("src"), "main.ts")
        assert len(messages) == 10
        capped = await assembler.build_directory_context(ws.uri("src"), "main.ts", max_fragments=2)
        assert _names(capped) == ["src/a.ts", "src/b.ts"]

    @pytest.mark.asyncio
    async def test_skips_hidden_subdirectories_and_current(self, fake_workspace):
        ws = fake_workspace({
            "src/.eslintrc": "{}",
            "src/lib/util.ts": "u",
            "src/main.ts": "m",
            "src/app.ts": "a",
        })
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "main.ts")
        assert _names(messages) == ["src/app.ts"]

    @pytest.mark.asyncio
    async def test_include_current_file(self, fake_workspace):
        ws = fake_workspace({"src/main.ts": "m"})
        messages = await ContextAssembler(ws).build_directory_context(
            ws.uri("src"), "main.ts", exclude_current_file=False,
        )
        assert _names(messages) == ["src/main.ts"]

    @pytest.mark.asyncio
    async def test_read_failure_skips_file(self, fake_workspace):
        ws = fake_workspace(
            {"src/a.ts": "a", "src/b.ts": "b", "src/c.ts": "c"},
            fail_reads={"src/a.ts"}, fail_stats={"src/b.ts"},
        )
        messages = await ContextAssembler(ws).build_directory_context(ws.uri("src"), "main.ts")
        assert _names(messages) == ["src/c.ts"]

    @pytest.mark.asyncio
    async def test_content_truncated(self, fake_workspace):
        ws = fake_workspace({"src/a.ts": "x" * 50})
        settings = ContextSettings(max_file_tokens=2)
        messages = await ContextAssembler(ws, settings).build_directory_context(ws.uri("src"), "m.ts")
        assert messages[0].text.endswith(": xxxxxxxx")

    @pytest.mark.asyncio
    async def test_build_directory_messages_has_no_cap(self, fake_workspace):
        ws = fake_workspace({f"src/{c}.ts": c for c in "abcdefg"})
        assembler = ContextAssembler(ws)
        entries = await assembler.list_directory_files(ws.uri("src"))
        messages = await assembler.build_directory_messages(ws.uri("src"), entries)
        assert _names(messages) == [f"src/{c}.ts" for c in "abcdefg"]


class TestCurrentFileContext:
    @pytest.mark.asyncio
    async def test_code_template(self, fake_workspace):
        ws = fake_workspace({"src/main.py": "print(1)"})
        messages = await ContextAssembler(ws).build_current_file_context(ws.uri("src/main.py"))
        assert messages[0].text == (
            "Use the following code snippet from file `src/main.py`:\n```python\nprint(1)\n```"
        )
        assert messages[1].text == "Ok."

    @pytest.mark.asyncio
    async def test_truncated_to_token_budget(self, fake_workspace):
        ws = fake_workspace({"big.ts": "y" * 5000})
        messages = await ContextAssembler(ws).build_current_file_context(ws.uri("big.ts"))
        assert "y" * 4000 in messages[0].text
        assert "y" * 4001 not in messages[0].text

    @pytest.mark.asyncio
    async def test_empty_file(self, fake_workspace):
        ws = fake_workspace({"empty.ts": ""})
        assert await ContextAssembler(ws).build_current_file_context(ws.uri("empty.ts")) == []


class TestTestFileContext:
    @pytest.mark.asyncio
    async def test_same_name_test_file_wins(self, fake_workspace):
        ws = fake_workspace({
            "src/foo.ts": "f",
            "test/other.test.ts": "o",
            "src/foo.test.ts": "t",
        })
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts")
        assert _names(messages) == ["src/foo.test.ts"]
        assert len(ws.find_calls) == 1

    @pytest.mark.asyncio
    async def test_same_name_reads_open_buffer(self, fake_workspace):
        ws = fake_workspace({"src/foo.test.ts": "disk"})
        ws.open_documents[ws.uri("src/foo.test.ts")] = "buffer"
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts")
        assert "buffer" in messages[0].text

    @pytest.mark.asyncio
    async def test_codebase_search_capped(self, fake_workspace):
        files = {f"pkg{i}/mod{i}.test.ts": str(i) for i in range(7)}
        ws = fake_workspace(files)
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts")
        assert _names(messages) == [f"pkg{i}/mod{i}.test.ts" for i in range(5)]
        assert ws.find_calls[-1] == ("**/*[tT]est*.ts", DEFAULT_EXCLUDE_PATTERN, 5)

    @pytest.mark.asyncio
    async def test_codebase_search_filters_names(self, fake_workspace):
        ws = fake_workspace({"src/contest.ts": "c", "src/latest.ts": "l", "src/util.test.ts": "u"})
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts")
        assert _names(messages) == ["src/util.test.ts"]

    @pytest.mark.asyncio
    async def test_unit_test_only(self, fake_workspace):
        ws = fake_workspace({
            "e2e/foo.test.ts": "e",
            "integration-tests/foo.test.ts": "i",
            "unit/foo.test.ts": "u",
        })
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts", unit_test_only=True)
        assert _names(messages) == ["unit/foo.test.ts"]
        assert ws.find_calls[0][1] == UNIT_TEST_EXCLUDE_PATTERN

    @pytest.mark.asyncio
    async def test_unreadable_test_file_skipped(self, fake_workspace):
        ws = fake_workspace({"a/x.test.ts": "x", "b/y.test.ts": "y"}, fail_reads={"a/x.test.ts"})
        messages = await ContextAssembler(ws).build_test_file_context("foo.ts")
        assert _names(messages) == ["b/y.test.ts"]

    @pytest.mark.asyncio
    async def test_search_timeout_gives_empty(self, fake_workspace):
        ws = fake_workspace({"src/foo.test.ts": "t"}, search_delay=5.0)
        settings = ContextSettings(search_timeout=0.05)
        assert await ContextAssembler(ws, settings).build_test_file_context("foo.ts") == []


class TestAssemble:
    @pytest.mark.asyncio
    async def test_order_and_dedup(self, fake_workspace):
        ws = fake_workspace({
            "src/bar.ts": "b",
            "src/foo.test.ts": "t",
            "src/foo.ts": "f",
        })
        messages = await ContextAssembler(ws).assemble(ws.uri("src/foo.ts"))
        assert _names(messages) == ["src/foo.ts", "src/foo.test.ts", "src/bar.ts"]
        assert len(messages) == 6

    @pytest.mark.asyncio
    async def test_without_directory(self, fake_workspace):
        ws = fake_workspace({"src/bar.ts": "b", "src/foo.ts": "f"})
        messages = await ContextAssembler(ws).assemble(ws.uri("src/foo.ts"), include_directory=False)
        assert _names(messages) == ["src/foo.ts"]
