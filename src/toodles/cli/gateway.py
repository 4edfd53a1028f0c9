"""Console gateway: shows turn replies in the terminal."""

from rich.console import Console


class ConsolePendingReply:
    """Placeholder line whose final text is printed on edit."""

    def __init__(self, console: Console):
        self._console = console

    async def edit(self, text: str) -> None:
        self._console.print(f"[bold green]Toodles:[/bold green] {text}\n")


class ConsoleReplyChannel:
    """ReplyChannel writing to a Rich console."""

    def __init__(self, console: Console):
        self._console = console

    async def send(self, text: str) -> ConsolePendingReply:
        self._console.print(f"[dim]{text}[/dim]")
        return ConsolePendingReply(self._console)
