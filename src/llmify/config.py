from __future__ import annotations

from enum import StrEnum, auto

DEFAULT_OUTPUT = "llm.txt"
GITIGNORE_NAME = ".gitignore"
LLMIGNORE_NAME = ".llmignore"

SNIFF_BYTES = 4096
# Share of NUL/control bytes in the sniffed chunk above which a file is binary.
CONTROL_BYTE_RATIO_THRESHOLD = 0.30
DEFAULT_MAX_FILE_CHARS = 100_000
SEPARATOR = "=" * 60


class FileType(StrEnum):
    """Categorization of files by extension, used for language hints.

    This is a heuristic classification based on file extensions and a few
    well-known base names.
    """

    TEXT = auto()
    PYTHON = auto()
    TOML = auto()
    JSON = auto()
    MARKDOWN = auto()
    RST = auto()
    YAML = auto()
    HTML = auto()
    CSS = auto()
    SCSS = auto()
    JAVASCRIPT = auto()
    TYPESCRIPT = auto()
    VUE = auto()
    SVELTE = auto()
    SHELL = auto()
    POWERSHELL = auto()
    RUST = auto()
    GO = auto()
    PHP = auto()
    RUBY = auto()
    PERL = auto()
    LUA = auto()
    R = auto()
    SQL = auto()
    CSV = auto()
    JAVA = auto()
    KOTLIN = auto()
    SCALA = auto()
    CSHARP = auto()
    SWIFT = auto()
    C = auto()
    CPP = auto()
    XML = auto()
    INI = auto()
    TERRAFORM = auto()
    DOCKERFILE = auto()
    MAKEFILE = auto()
    OTHER = auto()


EXT2LANG: dict[str, FileType] = {
    ".bash": FileType.SHELL,
    ".c": FileType.C,
    ".cc": FileType.CPP,
    ".cfg": FileType.INI,
    ".cjs": FileType.JAVASCRIPT,
    ".conf": FileType.INI,
    ".cpp": FileType.CPP,
    ".cs": FileType.CSHARP,
    ".css": FileType.CSS,
    ".csv": FileType.CSV,
    ".cxx": FileType.CPP,
    ".dockerfile": FileType.DOCKERFILE,
    ".go": FileType.GO,
    ".h": FileType.C,
    ".hcl": FileType.TERRAFORM,
    ".hh": FileType.CPP,
    ".hpp": FileType.CPP,
    ".htm": FileType.HTML,
    ".html": FileType.HTML,
    ".ini": FileType.INI,
    ".java": FileType.JAVA,
    ".js": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".jsx": FileType.JAVASCRIPT,
    ".kt": FileType.KOTLIN,
    ".kts": FileType.KOTLIN,
    ".less": FileType.CSS,
    ".lua": FileType.LUA,
    ".markdown": FileType.MARKDOWN,
    ".md": FileType.MARKDOWN,
    ".mjs": FileType.JAVASCRIPT,
    ".php": FileType.PHP,
    ".pl": FileType.PERL,
    ".pm": FileType.PERL,
    ".ps1": FileType.POWERSHELL,
    ".py": FileType.PYTHON,
    ".pyw": FileType.PYTHON,
    ".r": FileType.R,
    ".rb": FileType.RUBY,
    ".rs": FileType.RUST,
    ".rst": FileType.RST,
    ".sass": FileType.SCSS,
    ".scala": FileType.SCALA,
    ".scss": FileType.SCSS,
    ".sh": FileType.SHELL,
    ".sql": FileType.SQL,
    ".svelte": FileType.SVELTE,
    ".swift": FileType.SWIFT,
    ".tf": FileType.TERRAFORM,
    ".tfvars": FileType.TERRAFORM,
    ".toml": FileType.TOML,
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TYPESCRIPT,
    ".txt": FileType.TEXT,
    ".vue": FileType.VUE,
    ".xml": FileType.XML,
    ".yaml": FileType.YAML,
    ".yml": FileType.YAML,
    ".zsh": FileType.SHELL,
}

NAME2LANG: dict[str, FileType] = {
    "dockerfile": FileType.DOCKERFILE,
    "makefile": FileType.MAKEFILE,
    "gnumakefile": FileType.MAKEFILE,
}

_FENCE_LANGUAGE: dict[FileType, str] = {
    FileType.PYTHON: "python",
    FileType.TOML: "toml",
    FileType.JSON: "json",
    FileType.MARKDOWN: "markdown",
    FileType.RST: "rst",
    FileType.YAML: "yaml",
    FileType.HTML: "html",
    FileType.CSS: "css",
    FileType.SCSS: "scss",
    FileType.JAVASCRIPT: "javascript",
    FileType.TYPESCRIPT: "typescript",
    FileType.VUE: "vue",
    FileType.SVELTE: "svelte",
    FileType.SHELL: "bash",
    FileType.POWERSHELL: "powershell",
    FileType.RUST: "rust",
    FileType.GO: "go",
    FileType.PHP: "php",
    FileType.RUBY: "ruby",
    FileType.PERL: "perl",
    FileType.LUA: "lua",
    FileType.R: "r",
    FileType.SQL: "sql",
    FileType.CSV: "csv",
    FileType.JAVA: "java",
    FileType.KOTLIN: "kotlin",
    FileType.SCALA: "scala",
    FileType.CSHARP: "csharp",
    FileType.SWIFT: "swift",
    FileType.C: "c",
    FileType.CPP: "cpp",
    FileType.XML: "xml",
    FileType.INI: "ini",
    FileType.TERRAFORM: "hcl",
    FileType.DOCKERFILE: "dockerfile",
    FileType.MAKEFILE: "makefile",
    FileType.TEXT: "text",
    FileType.OTHER: "",
}

# Extensions and exact base names that are never sniffed.
BINARY_EXTENSIONS: frozenset[str] = frozenset({
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".ico", ".webp",
    # documents
    ".pdf", ".doc", ".docx", ".ppt", ".pptx", ".xls", ".xlsx", ".odt", ".odp", ".ods",
    # audio
    ".mp3", ".wav", ".ogg", ".flac", ".aac", ".m4a",
    # video
    ".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv", ".webm",
    # archives
    ".zip", ".gz", ".tar", ".rar", ".7z", ".bz2", ".xz", ".tgz",
    # executables and libraries
    ".exe", ".dll", ".so", ".dylib", ".app", ".msi", ".deb", ".rpm",
    # compiled code
    ".o", ".a", ".obj", ".lib", ".class", ".jar", ".pyc", ".pyo", ".wasm",
    # databases
    ".sqlite", ".db", ".mdb", ".accdb", ".sqlite3",
    # fonts
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    # system and editor leftovers
    ".bak", ".tmp", ".swp", ".swo",
})  # fmt: skip

LOCKFILE_NAMES: frozenset[str] = frozenset({
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "composer.lock",
    "go.sum",
    "Cargo.lock",
    "Gemfile.lock",
    "Pipfile.lock",
    "poetry.lock",
    "uv.lock",
})

BINARY_NAMES: frozenset[str] = frozenset({".DS_Store", "Thumbs.db"}) | LOCKFILE_NAMES

# Pruned by name whatever the ignore files say.
ALWAYS_PRUNED_DIRS: frozenset[str] = frozenset({".git", "node_modules"})

HIDDEN_DIR_ALLOWLIST: tuple[str, ...] = (
    ".github",
    ".gitlab",
    ".circleci",
    ".devcontainer",
    ".vscode",
)

BUILTIN_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git/",
    ".hg/",
    ".svn/",
    "node_modules/",
    "**/__pycache__/",
    "**/.mypy_cache/",
    "**/.pytest_cache/",
    "**/.ruff_cache/",
    "vendor/",
    "build/",
    "dist/",
    "target/",
    "*.pyc",
    "*.pyo",
    "*.class",
    "*.log",
    "*.swp",
    ".DS_Store",
    "Thumbs.db",
    *sorted(LOCKFILE_NAMES),
    *(f"*{ext}" for ext in sorted(BINARY_EXTENSIONS)),
)

DEFAULT_LLMIGNORE_PATTERNS: tuple[str, ...] = (
    "# Default .llmignore created by llmify",
    "# Add or remove patterns as needed",
    "",
    "# Version control metadata",
    ".git/",
    ".hg/",
    ".svn/",
    "",
    "# Package lock files (large, machine-generated)",
    *sorted(LOCKFILE_NAMES),
    "",
    "# Dependency and package directories",
    "node_modules/",
    "bower_components/",
    "jspm_packages/",
    ".pnpm-store/",
    "vendor/",
    ".venv/",
    "venv/",
    "",
    "# Build output and artifacts",
    "dist/",
    "build/",
    "target/",
    "out/",
    "*.min.js",
    "*.min.css",
    "**/*.map",
    "**/__pycache__/",
    "**/.pytest_cache/",
    "**/.next/",
    "**/.nuxt/",
    ".turbo/",
    ".cache/",
    ".parcel-cache/",
    ".gradle/",
    "",
    "# Test coverage and reports",
    "coverage/",
    ".nyc_output/",
    "test-results/",
    "htmlcov/",
    "",
    "# Images and media",
    "*.jpg",
    "*.jpeg",
    "*.png",
    "*.gif",
    "*.ico",
    "*.svg",
    "*.webp",
    "*.mp3",
    "*.wav",
    "*.flac",
    "*.mp4",
    "*.mov",
    "*.webm",
    "",
    "# Archives and executables",
    "*.zip",
    "*.tar",
    "*.gz",
    "*.rar",
    "*.7z",
    "*.exe",
    "*.dll",
    "*.so",
    "*.dylib",
    "*.bin",
    "",
    "# Temporary and log files",
    "*.log",
    "*.tmp",
    "*.temp",
    "tmp/",
    "temp/",
    "logs/",
    "",
    "# IDE and editor files",
    ".idea/",
    ".vscode/",
    ".history/",
    "*.sublime-workspace",
    "*.sublime-project",
    "*.iml",
    "*.swp",
    "*.swo",
    "",
    "# OS metadata",
    ".DS_Store",
    "Thumbs.db",
    "",
    "# Local secrets",
    ".env",
    ".env.local",
    "",
    "# Output file itself",
)

ENV_PREFIX = "LLMIFY_"
RC_FILE_NAMES: tuple[str, ...] = (".llmifyrc.yaml", ".llmifyrc.yml")


def guess_file_type(name: str) -> FileType:
    """Heuristic guess of file type based on extension or well-known base name.

    Args:
        name (str): a file name or path.

    Returns:
        FileType: The guessed file type, or FileType.OTHER if unknown.
    """
    base = name.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot > 0:
        found = EXT2LANG.get(base[dot:].lower())
        if found is not None:
            return found
    return NAME2LANG.get(base.lower(), FileType.OTHER)


def guess_language(file_type: FileType) -> str:
    """Get the suggested code fence language for a given file type.

    Args:
        file_type (FileType): The categorized file type.

    Returns:
        str: The suggested language name for code fences, or empty string if none.
    """
    return _FENCE_LANGUAGE.get(file_type, "")
