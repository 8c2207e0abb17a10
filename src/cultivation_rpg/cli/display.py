"""Rich terminal rendition of the display/interaction collaborator."""
from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cultivation_rpg.content.catalog import Catalog
from cultivation_rpg.engine.display import DisplayProvider
from cultivation_rpg.mechanics.combat_math import health_bar
from cultivation_rpg.mechanics.progression import combatant_realm_name, realm_name, xp_for_next_level
from cultivation_rpg.models.action import Choice
from cultivation_rpg.models.character import CURRENCY_KEY, Combatant, Player
from cultivation_rpg.models.chat import ChatMessage

console = Console()

STYLES = {
    "narration": "white",
    "system": "cyan",
    "important": "bold yellow",
    "success": "green",
    "error": "bold red",
    "item-use": "magenta",
    "qi-recovery": "bright_blue",
    "loot": "yellow",
    "combat-player": "bold green",
    "combat-opponent": "bold red",
    "chat": "dim cyan",
}

CHOICE_STYLES = {
    "confirm": "green",
    "danger": "red",
    "special": "magenta",
    "neutral": "dim",
    "class_select": "yellow",
}


class ConsoleDisplay(DisplayProvider):
    def __init__(self, catalog: Catalog, console_: Console | None = None) -> None:
        self.console = console_ or console
        self.catalog = catalog
        self.choices: list[Choice] = []
        self.target = "main"

    def display_message(self, text: str, style: str = "narration") -> None:
        if style == "panel":
            self.console.print(Panel(Text.from_markup(text), border_style="cyan", box=box.ROUNDED))
            return
        self.console.print(Text(text, style=STYLES.get(style, "white")))

    def display_combat_action(self, text: str, style: str = "combat-player") -> None:
        self.console.rule(style="red dim")
        self.append_combat_action(text, style)

    def append_combat_action(self, text: str, style: str = "combat-player") -> None:
        self.console.print(Text(f"  {text}", style=STYLES.get(style, "white")))

    def update_stats_display(self, player: Player) -> None:
        line = Text()
        line.append(f"{player.name} ", style="bold")
        line.append(f"[{realm_name(player.cultivation_level)}] ", style="dim")
        hp_pct = player.health / max(player.max_health, 1)
        hp_color = "green" if hp_pct > 0.5 else ("yellow" if hp_pct > 0.25 else "red")
        line.append(f"HP {player.health}/{player.max_health}", style=hp_color)
        line.append(" | ", style="dim")
        line.append(f"QI {player.current_qi}/{player.max_qi}", style="bright_blue")
        line.append(" | ", style="dim")
        line.append(
            f"XP {player.cultivation_progress}/{xp_for_next_level(player.cultivation_level)}", style="white",
        )
        line.append(" | ", style="dim")
        line.append(f"{player.spirit_stones} stones", style="yellow")
        self.console.print(line)

    def update_combat_ui(self, player: Player, opponent: Combatant) -> None:
        table = Table(box=box.SIMPLE_HEAVY, border_style="red", show_header=False)
        table.add_column("Name", style="bold")
        table.add_column("Realm")
        table.add_column("HP")
        for fighter, color in ((player, "green"), (opponent, "red")):
            table.add_row(
                f"[{color}]{fighter.name}[/{color}]",
                combatant_realm_name(fighter),
                f"{health_bar(fighter.health, fighter.max_health)} {fighter.health}/{fighter.max_health}",
            )
        self.console.print(table)

    def populate_action_buttons(self, choices: list[Choice], target: str = "main") -> None:
        self.choices = list(choices)
        self.target = target
        title = "Combat" if target == "combat" else "Actions"
        self.console.print()
        self.console.print(f"[bold]{title}[/bold]")
        for i, choice in enumerate(self.choices, 1):
            color = CHOICE_STYLES.get(choice.style, "white")
            self.console.print(f"  [cyan]{i}.[/cyan] [{color}]{choice.text}[/{color}]")

    def get_modal_input(self, prompt: str, kind: str = "text") -> str | None:
        try:
            answer = self.console.input(f"[bold cyan]{prompt}[/bold cyan] ", password=(kind == "password"))
        except (EOFError, KeyboardInterrupt):
            self.console.print()
            return None
        answer = answer.strip()
        return answer or None

    def read_choice(self) -> Choice | None:
        """Prompt for a menu number. None on cancel or an invalid entry."""
        answer = self.get_modal_input(">")
        if answer is None:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(self.choices):
            return self.choices[int(answer) - 1]
        self.console.print("[dim]Pick one of the numbered actions.[/dim]")
        return None

    def populate_inventory_grid(self, player: Player) -> None:
        table = Table(title="Inventory", box=box.ROUNDED, border_style="yellow")
        table.add_column("Item", style="bold")
        table.add_column("Qty", justify="right")
        table.add_column("Type")
        table.add_column("Description", style="dim")
        for key, qty in sorted(player.resources.items()):
            if qty <= 0 or key == CURRENCY_KEY:
                continue
            item = self.catalog.item(key)
            name = item.name if item else key
            if key == player.equipped_weapon:
                name += " (equipped)"
            table.add_row(
                name,
                str(qty),
                item.item_type.value if item else "?",
                item.description if item else "",
            )
        if table.row_count == 0:
            self.console.print("[dim]Your storage ring is empty.[/dim]")
            return
        self.console.print(table)

    def display_chat_message(self, message: ChatMessage) -> None:
        line = Text()
        line.append(f"{message.timestamp} ", style="dim")
        line.append(f"{message.sender_name}: ", style="bold cyan")
        line.append(message.text)
        self.console.print(line)
