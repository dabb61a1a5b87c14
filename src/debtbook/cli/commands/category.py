"""Category commands."""

import click
from debtbook.cli.resolution import current_user_or_exit
from debtbook.domain.category import CATEGORY_TYPES, CategoryService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default income, expense and debt categories."""
    user = current_user_or_exit(ctx)
    count = CategoryService(ctx.obj["db"]).initialize_defaults(user.id)
    if count == 0:
        click.echo("Categories already exist. Skipping initialization.")
        return
    click.echo(f"Created {count} categories.")


@category_group.command("list")
@click.option("--type", "category_type", type=click.Choice(CATEGORY_TYPES), help="Only list this type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories."""
    user = current_user_or_exit(ctx)
    categories = CategoryService(ctx.obj["db"]).list_categories(user.id, category_type=category_type)
    if not categories:
        click.echo("No categories found. Run 'debtbook category init' to create the defaults.")
        return
    for cat in categories:
        click.echo(f"{cat.id} | {cat.type:7s} | {cat.icon or ' '} {cat.name}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
