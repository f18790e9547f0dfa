from __future__ import annotations

from types import MappingProxyType

NO_EXTENSION_NAME = "Text"

LANGUAGE_NAMES = MappingProxyType({
    "bat": "Batch",
    "c": "C",
    "cc": "C++",
    "clj": "Clojure",
    "cpp": "C++",
    "cs": "C#",
    "css": "CSS",
    "cxx": "C++",
    "dart": "Dart",
    "dockerfile": "Dockerfile",
    "ex": "Elixir",
    "exs": "Elixir",
    "fs": "F#",
    "go": "Go",
    "gradle": "Gradle",
    "groovy": "Groovy",
    "h": "C Header",
    "hpp": "C++ Header",
    "hs": "Haskell",
    "html": "HTML",
    "ini": "INI",
    "java": "Java",
    "js": "JavaScript",
    "json": "JSON",
    "jsx": "JavaScript React",
    "kt": "Kotlin",
    "kts": "Kotlin",
    "less": "Less",
    "lua": "Lua",
    "m": "Objective-C",
    "md": "Markdown",
    "php": "PHP",
    "pl": "Perl",
    "ps1": "PowerShell",
    "py": "Python",
    "pyi": "Python",
    "r": "R",
    "rb": "Ruby",
    "rs": "Rust",
    "sass": "Sass",
    "scala": "Scala",
    "scss": "SCSS",
    "sh": "Shell",
    "sql": "SQL",
    "svelte": "Svelte",
    "swift": "Swift",
    "tex": "LaTeX",
    "toml": "TOML",
    "ts": "TypeScript",
    "tsx": "TypeScript React",
    "txt": "Plain Text",
    "vue": "Vue",
    "xml": "XML",
    "yaml": "YAML",
    "yml": "YAML",
    "zig": "Zig",
    "zsh": "Shell",
})


def display_name(extension: str) -> str:
    """Human-readable language name for a file extension (``rs`` -> ``Rust``).

    Unknown extensions are shown uppercased (``xyz`` -> ``XYZ``).
    """
    ext = extension.lstrip(".")
    if not ext:
        return NO_EXTENSION_NAME
    return LANGUAGE_NAMES.get(ext.lower(), ext.upper())
