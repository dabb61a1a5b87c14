"""Budget commands."""

import click
from debtbook.cli.error_handling import handle_domain_error
from debtbook.cli.resolution import current_user_or_exit
from debtbook.domain.budget import BudgetService
from debtbook.domain.category import CategoryService
from debtbook.domain.errors import DomainError
from debtbook.utils.amount_parser import parse_amount
from debtbook.utils.date_parser import PERIODS, parse_date


@click.group()
def budget_group():
    """Manage budgets."""
    pass


@budget_group.command("add")
@click.argument("name")
@click.option("--amount", required=True, help="Spending limit")
@click.option("--period", type=click.Choice(PERIODS), default="monthly", show_default=True)
@click.option("--category", help="Category name or ID to track")
@click.option("--start-date", help="First day of the budget (defaults to the current period)")
@click.option("--end-date", help="Last day of the budget")
@click.pass_context
def add_budget(
    ctx,
    name: str,
    amount: str,
    period: str,
    category: str | None,
    start_date: str | None,
    end_date: str | None,
):
    """Add a budget.

    Examples:
        debtbook budget add Groceries --amount 400 --category "Food & Dining"
    """
    user = current_user_or_exit(ctx)
    db = ctx.obj["db"]
    category_id = None
    if category:
        category_service = CategoryService(db)
        found = category_service.get_category(category)
        if found is None:
            matches = [c for c in category_service.list_categories(user.id) if c.name == category]
            found = matches[0] if matches else None
        if found is None:
            click.echo(f"Error: Category '{category}' not found", err=True)
            ctx.exit(1)
        category_id = found.id

    try:
        budget_id = BudgetService(db).create_budget(
            user.id,
            name,
            parse_amount(amount),
            period=period,
            category_id=category_id,
            start_date=parse_date(start_date) if start_date else None,
            end_date=parse_date(end_date) if end_date else None,
        )
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added budget '{name}' (ID: {budget_id})")


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets."""
    user = current_user_or_exit(ctx)
    budgets = BudgetService(ctx.obj["db"]).list_budgets(user.id)
    if not budgets:
        click.echo("No budgets found.")
        return
    for budget in budgets:
        click.echo(f"{budget.id} | {budget.name:20s} | {budget.amount:>10.2f} | {budget.period}")


@budget_group.command("progress")
@click.argument("budget_id")
@click.pass_context
def budget_progress(ctx, budget_id: str):
    """Show spending against a budget."""
    try:
        progress = BudgetService(ctx.obj["db"]).get_budget_progress(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    budget = progress["budget"]
    click.echo(f"{budget.name} ({progress['start_date']} to {progress['end_date']})")
    click.echo(f"Spent:     {progress['spent']:.2f} / {budget.amount:.2f}")
    click.echo(f"Remaining: {progress['remaining']:.2f}")
    click.echo(f"Progress:  {progress['progress'] * 100:.0f}%")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
