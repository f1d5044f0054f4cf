"""
Rendering for the CLI.

One ``OutputContext`` is built per invocation and handed to every command
handler. Human mode writes labelled text through rich consoles; JSON mode
writes exactly one JSON document to stdout and sends everything else to stderr.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Mapping

from rich.console import Console

NO_COLOR_ENV = "NO_COLOR"


def _console(*, stderr: bool, color: bool) -> Console:
    return Console(
        stderr=stderr,
        color_system="auto" if color else None,
        no_color=not color,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


def color_enabled(no_color_flag: bool = False, env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    if no_color_flag:
        return False
    return not env.get(NO_COLOR_ENV)


@dataclass(frozen=True)
class OutputContext:
    json_mode: bool = False
    color: bool = True
    emoji: bool = True
    out: Console = None  # type: ignore[assignment]
    err: Console = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.out is None:
            object.__setattr__(self, "out", _console(stderr=False, color=self.color))
        if self.err is None:
            object.__setattr__(self, "err", _console(stderr=True, color=self.color))

    @classmethod
    def create(
        cls,
        *,
        json_mode: bool = False,
        no_color: bool = False,
        no_emoji: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> "OutputContext":
        return cls(json_mode=json_mode, color=color_enabled(no_color, env), emoji=not no_emoji)

    # -- machine mode ---------------------------------------------------

    def emit(self, data: Any) -> None:
        """Print one JSON document to stdout."""
        self.out.file.write(json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n")
        self.out.file.flush()

    # -- human mode -----------------------------------------------------

    def glyph(self, g: str) -> str:
        return f"{g} " if self.emoji else ""

    def line(self, text: str = "", *, style: str | None = None) -> None:
        self.out.print(text, style=style)

    def title(self, text: str, *, glyph: str = "", rule: str = "─") -> None:
        head = f"{self.glyph(glyph) if glyph else ''}{text}"
        self.out.print(head, style="bold cyan")
        self.out.print(rule * max(len(text) + (3 if glyph and self.emoji else 0), 3), style="dim")

    def field(self, label: str, value: Any, *, indent: int = 0, style: str | None = None) -> None:
        shown = "N/A" if value is None or value == "" else value
        self.out.print(f"{' ' * indent}{label}: {shown}", style=style)

    def success(self, text: str) -> None:
        self.out.print(f"{self.glyph('✅')}{text}", style="green")

    def warn(self, text: str) -> None:
        self.out.print(f"{self.glyph('⚠️')}{text}", style="yellow")

    def progress(self, text: str) -> None:
        """Status text; kept off stdout in JSON mode."""
        target = self.err if self.json_mode else self.out
        target.print(text, style="dim")

    def tip(self, text: str) -> None:
        self.err.print(f"{self.glyph('💡')}Tip: {text}", style="yellow")

    # -- errors ---------------------------------------------------------

    def error(self, *, code: str, message: str, status: int | None = None, hint: str | None = None) -> None:
        if self.json_mode:
            self.emit({"error": True, "code": code, "message": message, "status": status})
            return
        self.err.print(f"{self.glyph('❌')}Error: {message}", style="bold red")
        if hint:
            self.err.print(f"   {self.glyph('💡')}{hint}", style="yellow")

    # -- prompts --------------------------------------------------------

    def confirm(self, question: str, *, assume_yes: bool = False) -> bool:
        """Ask a yes/no question on stderr. Never blocks with --yes or in JSON mode."""
        if assume_yes or self.json_mode:
            return True
        self.err.print(f"{question} [y/N]: ", end="")
        try:
            answer = input()
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")
