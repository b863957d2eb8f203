"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import OutboundRequest
from ui.log_utils import write_cli_log, write_upstream_log

console = Console()


class RequestInfo:
    """Info about a single relayed request."""

    def __init__(self, method: str, path: str, status: int, elapsed: float, timestamp: datetime):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.status = status
        self.elapsed_ms = int(elapsed * 1000)
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing relayed requests and failures."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 10
        self._request_count = {"forwarded": 0, "relayed": 0, "failed": 0}
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

    def log_forward(self, request: OutboundRequest, *, path: str) -> None:
        """Log a request about to be sent upstream."""
        with self._lock:
            self._request_count["forwarded"] += 1
            write_upstream_log(
                request.method,
                request.url,
                request.headers,
                request.content,
                path=path,
            )
            self._refresh()

    def log_response(self, method: str, path: str, status: int, elapsed: float) -> None:
        """Log an upstream response relayed to the caller."""
        with self._lock:
            self._request_count["relayed"] += 1
            info = RequestInfo(method, path, status, elapsed, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            write_cli_log("RELAY", f"{method} {path}", status=status, ms=info.elapsed_ms)
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["failed"] += 1
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
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Widget API Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._request_count['forwarded']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Relayed: {self._request_count['relayed']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._request_count['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=3)
            table.add_column("Status", width=6)
            table.add_column("ms", justify="right", width=6)

            for info in self._recent:
                style = "green" if info.status < 400 else "yellow"
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    info.path,
                    f"[{style}]{info.status}[/{style}]",
                    str(info.elapsed_ms),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(
            content,
            title=f"[blue]Upstream {self.config.upstream.base_url}[/blue]",
            border_style="blue",
        )

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Point the widget at {widget_endpoint(self.config)}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


def widget_endpoint(config: Config) -> str:
    """Full URL of the mounted proxy endpoint."""
    return f"http://{config.proxy.host}:{config.proxy.port}{config.proxy.mount_path}"
