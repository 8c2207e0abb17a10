"""Typer CLI application."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="cultivation-rpg",
    help="A text cultivation RPG: meditate, fight, brew pills and trade.",
    no_args_is_help=False,
)


@app.command()
def play(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.toml"),
) -> None:
    """Enter the world of cultivation."""
    from cultivation_rpg.app import GameApp

    GameApp(config_path=config).run()


@app.command()
def recipes() -> None:
    """List every pill recipe and what it needs."""
    from rich.console import Console
    from rich.table import Table

    from cultivation_rpg.content.catalog import get_catalog

    catalog = get_catalog()
    table = Table(title="Pill Recipes")
    table.add_column("Pill", style="bold")
    table.add_column("Level", justify="right")
    table.add_column("QI", justify="right")
    table.add_column("Ingredients")
    for recipe in sorted(catalog.recipes.values(), key=lambda r: (r.required_cultivation_level, r.name)):
        table.add_row(
            recipe.name,
            str(recipe.required_cultivation_level),
            str(recipe.qi_cost),
            ", ".join(f"{qty} {catalog.item_name(key)}" for key, qty in recipe.ingredients.items()),
        )
    Console().print(table)


if __name__ == "__main__":
    app()
