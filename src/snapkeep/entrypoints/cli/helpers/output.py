"""Terminal output helpers for the SNAPKEEP CLI.

Status lines go to **stderr** with emoji glyphs that fall back to ASCII on
terminals that cannot encode them; review diffs are printed to stdout with
Rich so they can be piped.
"""

import click
from rich.console import Console
from rich.text import Text

from snapkeep.service_layer.synchronizer import ReviewItem

GLYPHS = {
    "warn": ("⚠️", "[!]"),
    "success": ("✅", "[OK]"),
}

DIFF_STYLES = {"+": "green", "-": "red", "@": "cyan"}


def _supports_character(character: str) -> bool:
    """Return True if `character` can be encoded on stderr."""
    stream = click.get_text_stream("stderr")
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Return the emoji for `kind`, or its ASCII fallback."""
    emoji, fallback = GLYPHS[kind]
    return emoji if _supports_character(emoji) else fallback


def warn(msg: str) -> None:
    """Emit a yellow, bold warning line to stderr."""
    click.secho(f"{glyph('warn')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green, bold success line to stderr."""
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def diff_text(diff: str) -> Text:
    """Colour a unified diff line by line."""
    text = Text()
    for line in diff.splitlines():
        if line.startswith(("+++", "---")):
            style = "bold"
        else:
            style = DIFF_STYLES.get(line[:1])
        text.append(line + "\n", style=style)
    return text


def print_review(console: Console, unit: str, items: list[ReviewItem]) -> None:
    """Print the diffs of `items` under a heading for `unit`."""
    for item in items:
        console.rule(f"{unit} :: {item.label}[{item.position}]")
        console.print(diff_text(item.diff()), end="")
