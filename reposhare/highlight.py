"""Language detection and syntax highlighting for viewed files.

The language is picked from the file extension; Pygments renders the source
to HTML. Rendering is pure, so it can run again on every load of the same
file and produce the same markup.
"""

from __future__ import annotations

from dataclasses import dataclass

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename
from pygments.util import ClassNotFound

PLAINTEXT = "plaintext"

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    "js": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "tsx": "tsx",
    "py": "python",
    "go": "go",
    "html": "html",
    "css": "css",
    "json": "json",
    "md": "markdown",
    "yml": "yaml",
    "yaml": "yaml",
    "sh": "bash",
    "bash": "bash",
    "sql": "sql",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "hpp": "cpp",
    "java": "java",
    "kt": "kotlin",
    "rb": "ruby",
    "php": "php",
    "rs": "rust",
    "swift": "swift",
    "txt": PLAINTEXT,
}


@dataclass(frozen=True)
class HighlightedSource:
    language: str
    html: str


def detect_language(filename: str) -> str:
    """Language name for ``filename`` based on its extension, or "plaintext"."""
    name = filename.rsplit("/", 1)[-1]
    if "." not in name:
        return PLAINTEXT
    extension = name.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(extension, PLAINTEXT)


def _lexer_for(language: str, filename: str, source: str) -> Lexer:
    if language != PLAINTEXT:
        try:
            return get_lexer_by_name(language, stripnl=False)
        except ClassNotFound:
            pass
        try:
            return get_lexer_for_filename(filename, source, stripnl=False)
        except ClassNotFound:
            pass
    return TextLexer(stripnl=False)


def highlight_source(source: str, filename: str) -> HighlightedSource:
    """
    Render file content as highlighted HTML.

    Args:
        source: Raw file text
        filename: File name or path, used to pick the language

    Returns:
        HighlightedSource with the detected language and HTML markup
    """
    language = detect_language(filename)
    lexer = _lexer_for(language, filename, source)
    formatter = HtmlFormatter(cssclass=f"highlight language-{language}")
    return HighlightedSource(language=language, html=highlight(source, lexer, formatter))


def stylesheet(style: str = "default") -> str:
    """CSS rules for the markup produced by ``highlight_source``."""
    return HtmlFormatter(style=style).get_style_defs(".highlight")
