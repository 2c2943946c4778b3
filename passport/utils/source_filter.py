"""Choose and chunk repository files for the multi-chunk code summary.

The README is excluded here because the impact prompt already carries it.
"""

PRIORITY_MANIFEST = 1  # package manifests describe purpose and dependencies
PRIORITY_ENTRY = 2     # entry points
PRIORITY_SOURCE = 3
PRIORITY_TEST = 4
PRIORITY_SKIP = 99

EXCLUDED_DIRS: set[str] = {
    "node_modules", "vendor", ".git", "dist", "build", "__pycache__",
    ".venv", "venv", "env", ".idea", ".vscode", ".tox", ".mypy_cache",
    ".pytest_cache", ".next", ".nuxt", "target", "bin", "obj",
    "coverage", "htmlcov", ".eggs", ".gradle", ".terraform",
}

EXCLUDED_EXTENSIONS: set[str] = {
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".svg", ".bmp", ".webp",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    ".mp3", ".mp4", ".avi", ".mov", ".wav",
    ".zip", ".tar", ".gz", ".bz2", ".rar", ".7z",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx",
    ".exe", ".dll", ".so", ".dylib", ".pyc", ".pyo", ".class", ".o",
    ".wasm", ".sqlite", ".db", ".map", ".lock",
}

EXCLUDED_FILENAMES: set[str] = {
    "package-lock.json", "yarn.lock", "poetry.lock", "Cargo.lock",
    "Gemfile.lock", "composer.lock", "go.sum", "pnpm-lock.yaml",
    "npm-shrinkwrap.json", ".DS_Store", "Thumbs.db", "LICENSE",
}

MANIFEST_FILENAMES: set[str] = {
    "package.json", "pyproject.toml", "setup.py", "setup.cfg",
    "Cargo.toml", "go.mod", "pom.xml", "build.gradle", "build.gradle.kts",
    "requirements.txt", "Gemfile", "Pipfile", "composer.json", "mix.exs",
}

ENTRY_POINTS: set[str] = {
    "main.py", "app.py", "__main__.py", "cli.py", "server.py",
    "index.ts", "index.js", "main.ts", "main.js", "server.ts", "server.js",
    "main.go", "main.rs", "lib.rs", "Program.cs",
}

SOURCE_EXTENSIONS: set[str] = {
    ".py", ".js", ".ts", ".jsx", ".tsx", ".go", ".rs", ".java",
    ".kt", ".rb", ".php", ".c", ".cpp", ".h", ".hpp", ".cs",
    ".swift", ".scala", ".clj", ".ex", ".exs", ".hs", ".lua",
    ".r", ".jl", ".sh", ".sql", ".proto", ".ipynb", ".vue", ".svelte",
}


def _extension(filename: str) -> str:
    dot_idx = filename.rfind(".")
    return filename[dot_idx:].lower() if dot_idx > 0 else ""


def should_exclude_path(path: str) -> bool:
    parts = path.split("/")
    if any(part in EXCLUDED_DIRS for part in parts[:-1]):
        return True

    filename = parts[-1]
    if filename in EXCLUDED_FILENAMES or filename.upper().startswith("README"):
        return True
    if _extension(filename) in EXCLUDED_EXTENSIONS:
        return True
    return filename.endswith((".min.js", ".min.css")) or ".chunk." in filename


def _is_test_path(path: str) -> bool:
    lower_path = path.lower()
    filename = lower_path.rsplit("/", 1)[-1]
    return (
        lower_path.startswith(("test/", "tests/", "spec/"))
        or "/test" in lower_path
        or "/spec" in lower_path
        or filename.startswith("test_")
        or filename.endswith(("_test.py", "_test.go"))
        or ".test." in filename
        or ".spec." in filename
    )


def get_file_priority(path: str) -> int:
    """Priority tier for a file (lower number = fetched first)."""
    filename = path.rsplit("/", 1)[-1]
    if filename in MANIFEST_FILENAMES:
        return PRIORITY_MANIFEST
    if filename not in ENTRY_POINTS and _extension(filename) not in SOURCE_EXTENSIONS:
        return PRIORITY_SKIP
    if _is_test_path(path):
        return PRIORITY_TEST
    if filename in ENTRY_POINTS:
        return PRIORITY_ENTRY
    return PRIORITY_SOURCE


def rank_and_select_files(files: list[dict], max_chars: int) -> list[dict]:
    """Rank files by priority, then depth and size, and fill the character budget.

    Args:
        files: dicts with "path" and "size" keys.
        max_chars: total size budget.
    """
    eligible = [
        f for f in files
        if not should_exclude_path(f["path"])
        and get_file_priority(f["path"]) != PRIORITY_SKIP
    ]
    eligible.sort(
        key=lambda f: (
            get_file_priority(f["path"]),
            f["path"].count("/"),
            f.get("size", 0),
        )
    )

    selected = []
    total_chars = 0
    for f in eligible:
        size = f.get("size", 0)
        if total_chars + size > max_chars and selected:
            continue  # a smaller file may still fit
        selected.append(f)
        total_chars += size
    return selected


def chunk_sources(
    contents: dict[str, str], chunk_chars: int, max_chunks: int
) -> list[str]:
    """Pack files into prompt-sized chunks, in the given order.

    A file larger than chunk_chars is cut to fit a chunk of its own. Files
    that would need more than max_chunks chunks are dropped.
    """
    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for path, text in contents.items():
        block = f"### {path}\n```\n{text}\n```\n"
        if len(block) > chunk_chars:
            block = block[: chunk_chars - 20] + "\n... [truncated]\n"
        if current and current_len + len(block) > chunk_chars:
            chunks.append("".join(current))
            current, current_len = [], 0
            if len(chunks) >= max_chunks:
                return chunks
        current.append(block)
        current_len += len(block)

    if current and len(chunks) < max_chunks:
        chunks.append("".join(current))
    return chunks
