# /backbonedocs/app.py
"""
Main application file for the Backbone Docs CLI.
Handles the Command-Line Interface (CLI) and user interactions over the
chapter directory and search engine.
"""
import sys

# Rich UI Components
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table, box

# Local module imports
from .config import DOCS_DIR, SEARCH_DEFAULT_MAX_EXCERPTS, console
from .observability import get_logger
from .resource_cache import ResourceCache
from .resource_directory import ResourceDirectory
from .resource_uris import storage_uri
from .search_engine import SearchEngine, SearchMatch

logger = get_logger(__name__)


# --- UI & Formatting Functions ---

def display_welcome_banner():
    """Displays the application's welcome banner."""
    console.print(Panel(
        "[bold magenta]Backbone Docs - Chapter Browser[/bold magenta]",
        subtitle="[cyan]Literal search across numbered chapters[/cyan]",
        expand=False
    ))
    console.print(f"[green]Docs folder: {DOCS_DIR}[/green]")


def build_chapter_table(listing: dict) -> Table:
    table = Table(title="Chapters", border_style="blue", header_style="bold", box=box.SQUARE)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Title", style="magenta")
    table.add_column("URI", style="white")
    for entry in listing.get("resources", []):
        metadata = entry.get("metadata") or {}
        table.add_row(f"{metadata.get('chapter', 0):02d}", escape(str(metadata.get("title", ""))), entry["uri"])
    return table


def build_search_table(query: str, matches: list[SearchMatch]) -> Table:
    table = Table(title=f'Results for "{escape(query)}"', border_style="green", header_style="bold", box=box.SQUARE)
    table.add_column("Chapter", style="cyan", justify="right")
    table.add_column("Title", style="magenta")
    table.add_column("Hits", style="yellow", justify="right")
    table.add_column("First excerpt", style="white")
    for match in matches:
        table.add_row(
            f"{match.chapter:02d}",
            escape(match.title),
            str(match.occurrences),
            escape(match.excerpts[0]) if match.excerpts else "",
        )
    return table


# --- Command Handlers ---

def handle_list_chapters(directory: ResourceDirectory):
    """Displays a table of all chapters currently on disk."""
    listing = directory.list_resources()
    if not listing["resources"]:
        console.print("[yellow]No chapters found.[/yellow]")
        return
    console.print(build_chapter_table(listing))


def handle_read_chapter(directory: ResourceDirectory):
    number = IntPrompt.ask("Chapter number")
    data = directory.read_resource(storage_uri(number))
    if "error" in data:
        console.print(f"[bold red]Error: {data['error']}[/bold red]")
        return
    console.print(Markdown(data["content"]))


def handle_search(engine: SearchEngine):
    query = Prompt.ask("[bold cyan]Search text[/bold cyan]")
    case_sensitive = Prompt.ask("Case sensitive?", choices=["y", "n"], default="n") == "y"
    max_excerpts = IntPrompt.ask("Excerpts per chapter", default=SEARCH_DEFAULT_MAX_EXCERPTS)
    matches = engine.search(query, case_sensitive=case_sensitive, max_excerpts=max_excerpts)
    if not matches:
        console.print(f'[yellow]No matches for "{escape(query.strip())}".[/yellow]')
        return
    console.print(build_search_table(query.strip(), matches))
    for match in matches:
        console.print(f"\n[bold]{match.uri}[/bold] [dim]({match.occurrences} occurrences)[/dim]")
        for excerpt in match.excerpts:
            console.print(f"  [dim]-[/dim] {escape(excerpt)}", highlight=False)


# --- Main Application Flow ---

def main():
    """Main application loop."""
    display_welcome_banner()
    cache = ResourceCache()
    directory = ResourceDirectory(cache)
    engine = SearchEngine(cache)

    while True:
        try:
            console.print("\n[bold]Main Menu:[/bold]")
            console.print("[green]1. List Chapters[/green]")
            console.print("[cyan]2. Read Chapter[/cyan]")
            console.print("[blue]3. Search Chapters[/blue]")
            console.print("[red]4. Exit[/red]")

            choice = Prompt.ask("Choose an option", choices=["1", "2", "3", "4"])

            if choice == "1":
                handle_list_chapters(directory)
            elif choice == "2":
                handle_read_chapter(directory)
            elif choice == "3":
                handle_search(engine)
            elif choice == "4":
                break
        except KeyboardInterrupt:
            break

    logger.info("cli_exit")
    console.print("\n[bold magenta]Goodbye![/bold magenta]")
    sys.exit(0)

if __name__ == "__main__":
    main()
