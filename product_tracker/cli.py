"""
Product Tracker CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Build the service context, sign in, run the store action.
  5. Print the result and any queued notifications to stdout.

The CLI is stateless: every command that touches user data signs in with
``--email`` / ``--password`` (or ``PRODUCT_TRACKER_EMAIL`` /
``PRODUCT_TRACKER_PASSWORD``).

Install and run::

    pip install -e .
    product-tracker --help
    product-tracker init-db
    product-tracker categories
    product-tracker sign-up --email me@example.com --full-name "Sam Doe"
    product-tracker add-product --name ClickFunnels --category software --price 97
    product-tracker recommend --name "ClickFunnels Pro" --budget 150 --goal side_hustle
    product-tracker dashboard
"""

from __future__ import annotations

import asyncio
import json
from datetime import date
from pathlib import Path
from typing import Awaitable, Callable, Optional

import typer

from product_tracker.taxonomy.product_taxonomy import ProductCategory, UserGoal

app = typer.Typer(
    name="product-tracker",
    help="Track purchased marketing tools and get buy / don't-buy recommendations.",
    add_completion=False,
)


# ── Shared options ────────────────────────────────────────────────────────────

_CONFIG = typer.Option(None, "--config", help="Path to TOML config file.")
_EMAIL = typer.Option(
    ..., "--email", envvar="PRODUCT_TRACKER_EMAIL", help="Account email."
)
_PASSWORD = typer.Option(
    ...,
    "--password",
    envvar="PRODUCT_TRACKER_PASSWORD",
    prompt=True,
    hide_input=True,
    help="Account password.",
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from product_tracker.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from product_tracker.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_date_or_exit(value: Optional[str], flag: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid {flag}: {exc}", err=True)
        raise typer.Exit(code=1)


def _flush_notifications(ctx) -> None:
    from product_tracker.reporting.formatters import format_notifications

    notes = ctx.notifier.drain()
    if notes:
        typer.echo(format_notifications(notes))


def _fail_if(store, failed: bool) -> None:
    """Exit with code 1 when a store action failed."""
    if failed:
        typer.echo(f"[ERROR] {store.error or 'Operation failed'}", err=True)
        raise typer.Exit(code=1)


def _run_signed_in(config, email: str, password: str, handler: Callable[..., Awaitable[None]]) -> None:
    """Build a context, sign in, run ``handler(ctx)``, and always clean up."""
    from product_tracker.context import build_context

    async def _main() -> None:
        ctx = build_context(config)
        try:
            user = await ctx.auth.sign_in(email, password)
            if user is None:
                typer.echo(f"[ERROR] Sign-in failed: {ctx.auth.error}", err=True)
                raise typer.Exit(code=1)
            await handler(ctx)
        finally:
            _flush_notifications(ctx)
            await ctx.aclose()

    asyncio.run(_main())


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Initialize the local SQLite database and apply the full schema.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    Also runs pending schema migrations.
    """
    from product_tracker.db.connection import get_connection
    from product_tracker.db.migrations import run_migrations
    from product_tracker.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if config.backend.kind != "sqlite":
        typer.echo("[ERROR] init-db only applies to backend.kind = 'sqlite'.", err=True)
        raise typer.Exit(code=1)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        migrations_applied = run_migrations(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Migrations applied: {migrations_applied}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG,
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Backend:          {config.backend.kind}")
    if config.backend.kind == "rest":
        typer.echo(f"  Backend URL:      {config.backend.url}")
    else:
        typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Scoring strategy: {config.scoring.strategy}")
    typer.echo(f"  Scoring seed:     {config.scoring.seed}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        dump = config.model_dump()
        if dump["backend"]["api_key"]:
            dump["backend"]["api_key"] = "***"
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(dump, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("categories")
def categories() -> None:
    """List the values accepted by --category and --goal."""
    from product_tracker.reporting.formatters import format_taxonomy

    typer.echo(format_taxonomy())


# ── Account commands ──────────────────────────────────────────────────────────

@app.command("sign-up")
def sign_up(
    email: str = _EMAIL,
    password: str = typer.Option(
        ...,
        "--password",
        envvar="PRODUCT_TRACKER_PASSWORD",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Account password (min 6 characters).",
    ),
    full_name: str = typer.Option(..., "--full-name", help="Display name."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Create an account and its profile."""
    from product_tracker.context import build_context
    from product_tracker.reporting.formatters import format_profile

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _main() -> None:
        ctx = build_context(config)
        try:
            user = await ctx.auth.sign_up(email, password, full_name)
            _fail_if(ctx.auth, user is None)
            if ctx.auth.profile is not None:
                typer.echo(format_profile(ctx.auth.profile))
            typer.echo(f"[OK] Signed up {email}.")
        finally:
            _flush_notifications(ctx)
            await ctx.aclose()

    asyncio.run(_main())


@app.command("profile")
def profile(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    full_name: Optional[str] = typer.Option(None, "--full-name", help="New display name."),
    budget: Optional[float] = typer.Option(None, "--budget", min=0, help="Monthly budget."),
    goals: Optional[list[UserGoal]] = typer.Option(
        None, "--goal", help="Goal (repeatable). Replaces the current goal set."
    ),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Show the profile, or update name / budget / goals when given."""
    from product_tracker.models.profile import ProfileUpdate
    from product_tracker.reporting.formatters import format_profile

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    changes: dict = {}
    if full_name is not None:
        changes["full_name"] = full_name
    if budget is not None:
        changes["budget"] = budget
    if goals:
        changes["goals"] = goals

    async def _handler(ctx) -> None:
        if changes:
            updated = await ctx.auth.update_profile(ProfileUpdate(**changes))
            _fail_if(ctx.auth, updated is None)
            typer.echo("[OK] Profile updated.")
        if ctx.auth.profile is not None:
            typer.echo(format_profile(ctx.auth.profile))

    _run_signed_in(config, email, password, _handler)


# ── Product commands ──────────────────────────────────────────────────────────

@app.command("add-product")
def add_product(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    name: str = typer.Option(..., "--name", help="Product name."),
    category: ProductCategory = typer.Option(
        ProductCategory.COURSE, "--category", help="Product category (see `categories`)."
    ),
    price: float = typer.Option(0.0, "--price", min=0, help="Monthly price."),
    description: str = typer.Option("", "--description"),
    url: str = typer.Option("", "--url"),
    purchase_date: Optional[str] = typer.Option(
        None, "--purchase-date", help="ISO date (default: today)."
    ),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Add a product; it is analyzed and tagged on the way in."""
    from pydantic import ValidationError

    from product_tracker.models.product import ProductDraft
    from product_tracker.reporting.formatters import format_product_detail

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    fields: dict = dict(
        name=name, category=category, price=price, description=description, url=url
    )
    bought = _parse_date_or_exit(purchase_date, "--purchase-date")
    if bought is not None:
        fields["purchase_date"] = bought
    try:
        draft = ProductDraft(**fields)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid product:\n{exc}", err=True)
        raise typer.Exit(code=1)

    async def _handler(ctx) -> None:
        product_id = await ctx.products.add_product(draft, ctx.auth.user.id)
        _fail_if(ctx.products, product_id is None)
        product = ctx.products.get_product(product_id)
        if product is not None:
            typer.echo(format_product_detail(product))

    _run_signed_in(config, email, password, _handler)


@app.command("list-products")
def list_products(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    detail: bool = typer.Option(False, "--detail", help="Show analysis for each product."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """List products, newest purchase first."""
    from product_tracker.reporting.formatters import format_product_detail, format_product_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _handler(ctx) -> None:
        await ctx.products.fetch_products(ctx.auth.user.id)
        _fail_if(ctx.products, ctx.products.error is not None)
        typer.echo(format_product_table(ctx.products.products))
        if detail:
            for product in ctx.products.products:
                typer.echo(format_product_detail(product))

    _run_signed_in(config, email, password, _handler)


@app.command("update-product")
def update_product(
    product_id: str = typer.Argument(..., help="Product id."),
    email: str = _EMAIL,
    password: str = _PASSWORD,
    name: Optional[str] = typer.Option(None, "--name"),
    category: Optional[ProductCategory] = typer.Option(
        None, "--category", help="New category (see `categories`)."
    ),
    price: Optional[float] = typer.Option(None, "--price", min=0),
    description: Optional[str] = typer.Option(None, "--description"),
    url: Optional[str] = typer.Option(None, "--url"),
    purchase_date: Optional[str] = typer.Option(None, "--purchase-date", help="ISO date."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Edit fields of a product. Only the given options are changed."""
    from pydantic import ValidationError

    from product_tracker.models.product import ProductUpdate
    from product_tracker.reporting.formatters import format_product_detail

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    changes = {
        k: v
        for k, v in dict(
            name=name, category=category, price=price, description=description, url=url,
            purchase_date=_parse_date_or_exit(purchase_date, "--purchase-date"),
        ).items()
        if v is not None
    }
    if not changes:
        typer.echo("[ERROR] Nothing to update; pass at least one field option.", err=True)
        raise typer.Exit(code=1)
    try:
        updates = ProductUpdate(**changes)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid update:\n{exc}", err=True)
        raise typer.Exit(code=1)

    async def _handler(ctx) -> None:
        product = await ctx.products.update_product(product_id, updates, ctx.auth.user.id)
        _fail_if(ctx.products, product is None)
        typer.echo(format_product_detail(product))

    _run_signed_in(config, email, password, _handler)


@app.command("delete-product")
def delete_product(
    product_id: str = typer.Argument(..., help="Product id."),
    email: str = _EMAIL,
    password: str = _PASSWORD,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Delete a product permanently."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if not yes:
        typer.confirm(f"Delete product {product_id}?", abort=True)

    async def _handler(ctx) -> None:
        deleted = await ctx.products.delete_product(product_id, ctx.auth.user.id)
        _fail_if(ctx.products, not deleted)

    _run_signed_in(config, email, password, _handler)


# ── Recommendation commands ───────────────────────────────────────────────────

@app.command("recommend")
def recommend(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    name: str = typer.Option(..., "--name", help="Product you are considering."),
    url: str = typer.Option("", "--url"),
    budget: Optional[float] = typer.Option(
        None, "--budget", min=0, help="Monthly budget (default: profile budget)."
    ),
    goals: Optional[list[UserGoal]] = typer.Option(
        None, "--goal", help="Goal (repeatable; default: profile goals)."
    ),
    product_id: Optional[str] = typer.Option(
        None, "--product-id", help="Tracked product this recommendation concerns."
    ),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Ask whether a product is worth buying given budget, goals and current stack."""
    from product_tracker.models.recommendation import ProductRecommendationRequest
    from product_tracker.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _handler(ctx) -> None:
        profile = ctx.auth.profile
        await ctx.products.fetch_products(ctx.auth.user.id)
        _fail_if(ctx.products, ctx.products.error is not None)

        request = ProductRecommendationRequest(
            product_name=name,
            product_url=url,
            user_budget=budget if budget is not None else ((profile and profile.budget) or 0.0),
            user_goals=[str(g) for g in (goals or (profile.goals if profile else []))],
            existing_products=ctx.products.products,
            user_id=ctx.auth.user.id,
            product_id=product_id,
        )
        rec = await ctx.recommendations.request_recommendation(request)
        _fail_if(ctx.recommendations, rec is None)
        typer.echo(format_recommendation(rec))

    _run_signed_in(config, email, password, _handler)


@app.command("insights")
def insights(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    save_to_profile: bool = typer.Option(
        True, "--save-to-profile/--no-save-to-profile",
        help="Also store the insights on the profile.",
    ),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Generate profile insights from tracked products."""
    from product_tracker.models.profile import ProfileUpdate
    from product_tracker.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _handler(ctx) -> None:
        user_id = ctx.auth.user.id
        await ctx.products.fetch_products(user_id)
        _fail_if(ctx.products, ctx.products.error is not None)

        rec = await ctx.recommendations.generate_user_insights(user_id, ctx.products.products)
        _fail_if(ctx.recommendations, rec is None)
        typer.echo(format_recommendation(rec))

        if save_to_profile:
            updated = await ctx.auth.update_profile(ProfileUpdate(ai_insights=rec.insights))
            _fail_if(ctx.auth, updated is None)
            typer.echo("[OK] Insights saved to profile.")

    _run_signed_in(config, email, password, _handler)


@app.command("recommendations")
def recommendations(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    unread: bool = typer.Option(False, "--unread", help="Only unread recommendations."),
    rec_id: Optional[str] = typer.Option(None, "--id", help="Show one recommendation in full."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """List recommendations, newest first."""
    from product_tracker.reporting.formatters import (
        format_recommendation,
        format_recommendation_list,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _handler(ctx) -> None:
        store = ctx.recommendations
        await store.fetch_recommendations(ctx.auth.user.id)
        _fail_if(store, store.error is not None)

        if rec_id is not None:
            rec = store.get_recommendation(rec_id)
            if rec is None:
                typer.echo(f"[ERROR] No recommendation with id '{rec_id}'.", err=True)
                raise typer.Exit(code=1)
            typer.echo(format_recommendation(rec))
            return

        typer.echo(format_recommendation_list(store.unread if unread else store.recommendations))

    _run_signed_in(config, email, password, _handler)


@app.command("mark-read")
def mark_read(
    rec_id: Optional[str] = typer.Argument(None, help="Recommendation id."),
    email: str = _EMAIL,
    password: str = _PASSWORD,
    all_: bool = typer.Option(False, "--all", help="Mark every unread recommendation read."),
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Mark one recommendation (or all of them) as read."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if not all_ and rec_id is None:
        typer.echo("[ERROR] Pass a recommendation id or --all.", err=True)
        raise typer.Exit(code=1)

    async def _handler(ctx) -> None:
        store = ctx.recommendations
        user_id = ctx.auth.user.id
        await store.fetch_recommendations(user_id)
        _fail_if(store, store.error is not None)

        if all_:
            pending = store.unread_count
            marked = await store.mark_all_as_read(user_id)
            _fail_if(store, marked < pending)
            typer.echo(f"[OK] Marked {marked} recommendation(s) read.")
            return

        rec = await store.mark_as_read(rec_id, user_id)
        _fail_if(store, rec is None)
        typer.echo(f"[OK] Recommendation {rec.id} is read.")

    _run_signed_in(config, email, password, _handler)


# ── Dashboard ─────────────────────────────────────────────────────────────────

@app.command("dashboard")
def dashboard(
    email: str = _EMAIL,
    password: str = _PASSWORD,
    config_path: Optional[str] = _CONFIG,
) -> None:
    """Overview: recent products and recommendations, spend, unread count."""
    from product_tracker.reporting.dashboard import build_dashboard_summary
    from product_tracker.reporting.formatters import format_dashboard

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _handler(ctx) -> None:
        user_id = ctx.auth.user.id
        await ctx.products.fetch_products(user_id)
        _fail_if(ctx.products, ctx.products.error is not None)
        await ctx.recommendations.fetch_recommendations(user_id)
        _fail_if(ctx.recommendations, ctx.recommendations.error is not None)

        summary = build_dashboard_summary(
            ctx.products.products,
            ctx.recommendations.recommendations,
            recent_products=config.dashboard.recent_products,
            recent_recommendations=config.dashboard.recent_recommendations,
        )
        typer.echo(format_dashboard(summary))

    _run_signed_in(config, email, password, _handler)


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
