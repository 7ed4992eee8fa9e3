"""Human readable messages, formatted with rich markup."""

from typing import Optional, Sequence


class FileMessages:
    def watching(self, paths: Optional[Sequence[str]] = None) -> str:
        """Describe what a session is watching.

        Called with the matched paths when there are any and with no
        arguments when nothing matched.
        """
        if paths is None:
            return "[yellow]Not watching any files...[/yellow]"

        lines = ["[green]Watching files...[/green]"]
        lines.extend(f"  [cyan]{path}[/cyan]" for path in paths)
        return "\n".join(lines)

    def changed(self, path: str) -> str:
        return f"[magenta]File changed:[/magenta] {path}"


files = FileMessages()
