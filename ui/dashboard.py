"""Real-time CLI dashboard for duplicator monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import ForwardOutcome, ForwardRequest
from ui.log_utils import write_cli_log, write_forward_log, write_outcome_log

console = Console()


class ForwardInfo:
    """Info about a single duplicated request."""

    def __init__(
        self,
        route: str,
        size: int,
        stable: str,
        dev: str,
        status: int,
        elapsed: float,
        timestamp: datetime,
    ):
        self.route = route
        self.size = size
        self.stable = stable[:30] + "..." if len(stable) > 30 else stable
        self.dev = dev[:30] + "..." if len(dev) > 30 else dev
        self.status = status
        self.elapsed_ms = elapsed * 1000
        self.timestamp = timestamp


class PlainLogger:
    """Request logger printing one console line per event."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()

    def log_forward(self, request: ForwardRequest, headers: dict[str, str]) -> None:
        write_forward_log(request, headers)
        write_cli_log("FORWARD", request.route.path, size=request.size, sha256=request.digest[:12])

    def log_outcomes(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
        *,
        status: int,
        elapsed: float,
    ) -> None:
        write_outcome_log(request, stable, dev, status=status, elapsed=elapsed)
        with self._lock:
            console.print(
                f"[dim]{datetime.now():%H:%M:%S}[/dim] {request.route.path} "
                f"stable={stable.describe()} dev={dev.describe()} -> [bold]{status}[/bold] "
                f"[dim]({elapsed * 1000:.0f}ms)[/dim]"
            )

    def log_divergence(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
    ) -> None:
        write_cli_log(
            "DIVERGENCE",
            request.route.path,
            stable=stable.describe(),
            dev=dev.describe(),
            sha256=request.digest[:12],
        )

    def log_error(self, route: str, status: int, message: str) -> None:
        with self._lock:
            console.print(f"[red]! {route} {status}:[/red] {message[:200]}")
        write_cli_log("ERROR", message[:200], route=route, status=status)


class Dashboard(PlainLogger):
    """Real-time dashboard showing recent duplicated requests."""

    def __init__(self, config: Config):
        super().__init__(config)
        self._recent: list[ForwardInfo] = []
        self._max_recent = 10
        self._request_count = {"post_data": 0, "post_error": 0}
        self._divergences = 0
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(self, request: ForwardRequest, headers: dict[str, str]) -> None:
        """Log an inbound request about to be duplicated."""
        with self._lock:
            self._request_count[request.route.value] += 1
            self._refresh()
        write_forward_log(request, headers)
        write_cli_log("FORWARD", request.route.path, size=request.size, sha256=request.digest[:12])

    def log_outcomes(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
        *,
        status: int,
        elapsed: float,
    ) -> None:
        """Log both backend outcomes and the reply status."""
        with self._lock:
            info = ForwardInfo(
                route=request.route.path,
                size=request.size,
                stable=stable.describe(),
                dev=dev.describe(),
                status=status,
                elapsed=elapsed,
                timestamp=datetime.now(),
            )
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()
        write_outcome_log(request, stable, dev, status=status, elapsed=elapsed)

    def log_divergence(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
    ) -> None:
        """Count a request where stable and dev answered differently."""
        with self._lock:
            self._divergences += 1
            self._refresh()
        super().log_divergence(request, stable, dev)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_recent_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Request Duplicator", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"data: {self._request_count['post_data']}", style="blue")
        stats.append("  |  ")
        stats.append(f"error: {self._request_count['post_error']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"diverged: {self._divergences}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_recent_panel(self) -> Panel:
        """Build the recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Route", width=11)
            table.add_column("Size", justify="right", width=6)
            table.add_column("Stable", ratio=1)
            table.add_column("Dev", ratio=1)
            table.add_column("Reply", width=5)
            table.add_column("ms", justify="right", width=7)

            for info in self._recent:
                reply_style = "green" if info.status < 400 else "red"
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.route,
                    str(info.size),
                    info.stable,
                    info.dev,
                    f"[{reply_style}]{info.status}[/{reply_style}]",
                    f"{info.elapsed_ms:.0f}",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        stable = self.config.stable
        dev = self.config.dev
        title = (
            f"[blue]stable {stable.scheme}://{stable.host}:{stable.port}[/blue]"
            f"  [magenta]dev {dev.scheme}://{dev.host}:{dev.port}[/magenta]"
        )
        return Panel(content, title=title, border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            scheme = "https" if self.config.tls.enabled else "http"
            content = Text(
                f"POST {scheme}://localhost:{self.config.proxy.port}/post_data or /post_error",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
