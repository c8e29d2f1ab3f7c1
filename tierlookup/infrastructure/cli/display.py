import logging
from datetime import datetime
from typing import Any, Dict, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tierlookup.domain.interfaces.user_interface import UserInterface
from tierlookup.domain.models.profile import ProfileResult

logger = logging.getLogger(__name__)

# Number of tests shown in the "Recent tests" table
RECENT_TEST_COUNT = 5


def format_tier(tier: Optional[int], pos: Optional[int], retired: bool = False) -> str:
    """Formats an MCTiers ranking as e.g. 'HT3', 'LT1' or 'RHT2'."""
    if tier is None:
        return "-"
    label = f"{'HT' if pos == 0 else 'LT'}{tier}"
    return f"R{label}" if retired else label


def format_timestamp(value: Any) -> str:
    if not isinstance(value, (int, float)) or value <= 0:
        return "-"
    return datetime.fromtimestamp(value).strftime("%Y-%m-%d")


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_profile(self, profile: ProfileResult, from_cache: bool = False, **kwargs: Any) -> None:
        """Renders a profile as a summary panel plus gamemode and test tables."""
        source = "[dim]cached[/dim]" if from_cache else "[dim]live[/dim]"
        header = f"[bold white]{profile.name}[/bold white] [dim]·[/dim] {source}"

        summary = Table(show_header=False, box=None, padding=(0, 1))
        summary.add_column(style="bold cyan")
        summary.add_column()
        summary.add_row("Region", str(profile.region or "-"))
        summary.add_row("Points", str(profile.score if profile.score is not None else "-"))
        summary.add_row("Overall", f"#{profile.overall}" if profile.overall is not None else "-")
        if profile.first_test:
            summary.add_row("First test", format_timestamp(profile.first_test.get('at')))
        summary.add_row("Profile", profile.profile_url)

        self.console.print(Panel(summary, title=header, title_align="left", border_style="blue", box=ROUNDED))

        if profile.gamemodes:
            self.console.print(self._gamemode_table(profile))
        else:
            self.console.print(Text("No rankings yet.", style="dim"))

        if profile.tests:
            self.console.print(self._tests_table(profile))

    def _gamemode_table(self, profile: ProfileResult) -> Table:
        table = Table(title="Rankings", box=ROUNDED, border_style="cyan", header_style="bold cyan")
        table.add_column("Mode")
        table.add_column("Tier", justify="center")
        table.add_column("Peak", justify="center")
        for mode in profile.gamemodes:
            retired = bool(mode.get('retired'))
            table.add_row(
                str(mode['slug']),
                format_tier(mode.get('tier'), mode.get('pos'), retired),
                format_tier(mode.get('peak_tier'), mode.get('peak_pos')),
            )
        return table

    def _tests_table(self, profile: ProfileResult) -> Table:
        table = Table(title="Recent tests", box=SIMPLE, header_style="bold cyan")
        table.add_column("Date")
        table.add_column("Mode")
        table.add_column("Result", justify="center")
        for test in profile.tests[:RECENT_TEST_COUNT]:
            table.add_row(
                format_timestamp(test.get('at')),
                str(test.get('gamemode') or test.get('mode') or "-"),
                self._test_result(test),
            )
        return table

    @staticmethod
    def _test_result(test: Dict[str, Any]) -> str:
        if 'tier' in test:
            return format_tier(test.get('tier'), test.get('pos'))
        return str(test.get('result') or "-")

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Prints text unchanged (no markup, no highlighting)."""
        self.console.print(output, markup=False, highlight=False, soft_wrap=True)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message with enhanced styling.

        Args:
            info_message: The informational message to display.
        """
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message with enhanced styling.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
