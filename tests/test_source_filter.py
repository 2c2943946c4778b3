from passport.utils.source_filter import (
    PRIORITY_ENTRY,
    PRIORITY_MANIFEST,
    PRIORITY_SKIP,
    PRIORITY_SOURCE,
    PRIORITY_TEST,
    chunk_sources,
    get_file_priority,
    rank_and_select_files,
    should_exclude_path,
)


class TestShouldExcludePath:
    def test_excludes_node_modules(self):
        assert should_exclude_path("node_modules/express/index.js") is True

    def test_excludes_venv(self):
        assert should_exclude_path(".venv/lib/python3.12/site.py") is True

    def test_excludes_readme(self):
        assert should_exclude_path("README.md") is True
        assert should_exclude_path("docs/readme.rst") is True

    def test_excludes_binary_and_lock_files(self):
        assert should_exclude_path("images/logo.png") is True
        assert should_exclude_path("package-lock.json") is True
        assert should_exclude_path("uv.lock") is True

    def test_excludes_minified_and_chunks(self):
        assert should_exclude_path("static/app.min.js") is True
        assert should_exclude_path("static/main.abc123.chunk.js") is True

    def test_allows_source(self):
        assert should_exclude_path("src/main.py") is False
        assert should_exclude_path(".github/workflows/ci.yml") is False


class TestGetFilePriority:
    def test_manifest(self):
        assert get_file_priority("pyproject.toml") == PRIORITY_MANIFEST
        assert get_file_priority("web/package.json") == PRIORITY_MANIFEST

    def test_entry_point(self):
        assert get_file_priority("src/main.py") == PRIORITY_ENTRY

    def test_source(self):
        assert get_file_priority("src/utils/helpers.py") == PRIORITY_SOURCE

    def test_tests_deprioritised(self):
        assert get_file_priority("tests/test_app.py") == PRIORITY_TEST
        assert get_file_priority("web/app.spec.ts") == PRIORITY_TEST

    def test_non_source_skipped(self):
        assert get_file_priority("docs/guide.md") == PRIORITY_SKIP
        assert get_file_priority("config.yaml") == PRIORITY_SKIP


class TestRankAndSelectFiles:
    def test_manifest_first(self):
        files = [
            {"path": "src/lib.py", "size": 100},
            {"path": "src/main.py", "size": 100},
            {"path": "package.json", "size": 100},
        ]
        selected = rank_and_select_files(files, max_chars=10_000)
        assert [f["path"] for f in selected] == ["package.json", "src/main.py", "src/lib.py"]

    def test_respects_budget(self):
        files = [
            {"path": "src/a.py", "size": 600},
            {"path": "src/b.py", "size": 600},
        ]
        assert len(rank_and_select_files(files, max_chars=700)) == 1

    def test_smaller_file_still_fits(self):
        files = [
            {"path": "src/a.py", "size": 600},
            {"path": "src/big.py", "size": 900},
            {"path": "src/deep/c.py", "size": 50},
        ]
        paths = [f["path"] for f in rank_and_select_files(files, max_chars=700)]
        assert paths == ["src/a.py", "src/deep/c.py"]

    def test_empty_list(self):
        assert rank_and_select_files([], max_chars=10_000) == []


class TestChunkSources:
    def test_single_chunk(self):
        chunks = chunk_sources({"a.py": "x = 1", "b.py": "y = 2"}, 1000, 4)
        assert len(chunks) == 1
        assert "### a.py" in chunks[0]
        assert "### b.py" in chunks[0]

    def test_splits_on_budget(self):
        contents = {f"m{i}.py": "x" * 100 for i in range(4)}
        chunks = chunk_sources(contents, 150, 10)
        assert len(chunks) == 4
        assert all(len(chunk) <= 150 for chunk in chunks)

    def test_oversized_file_truncated(self):
        chunks = chunk_sources({"big.py": "x" * 5000}, 500, 4)
        assert len(chunks) == 1
        assert len(chunks[0]) <= 500
        assert chunks[0].endswith("... [truncated]\n")

    def test_max_chunks(self):
        contents = {f"m{i}.py": "x" * 100 for i in range(6)}
        assert len(chunk_sources(contents, 150, 2)) == 2

    def test_empty(self):
        assert chunk_sources({}, 100, 4) == []
