"""
ASCII terminal formatters for CLI commands.

All formatters accept models and return plain multi-line strings suitable
for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Sequence

from product_tracker.models.product import Product
from product_tracker.models.profile import UserProfile
from product_tracker.models.recommendation import (
    AIRecommendation,
    ProductPurchaseContent,
    UserInsights,
)
from product_tracker.notifications import Notification, NotificationLevel
from product_tracker.reporting.dashboard import DashboardSummary
from product_tracker.taxonomy.product_taxonomy import (
    CATEGORY_DESCRIPTIONS,
    CATEGORY_LABELS,
    GOAL_DESCRIPTIONS,
    GOAL_LABELS,
    ProductCategory,
    UserGoal,
    category_label,
    goal_label,
)

_NOTE_TAGS = {
    NotificationLevel.SUCCESS: "[OK]",
    NotificationLevel.ERROR: "[ERROR]",
    NotificationLevel.INFO: "[INFO]",
}


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _verdict(rec: AIRecommendation) -> str:
    if rec.purchase is not None:
        return "worth buying" if rec.purchase.worth_buying else "not recommended"
    return "profile insights"


# ── Notifications ─────────────────────────────────────────────────────────────


def format_notifications(notes: Sequence[Notification]) -> str:
    """One line per notification, tagged by level."""
    return "\n".join(f"{_NOTE_TAGS[n.level]} {n.message}" for n in notes)


# ── Products ──────────────────────────────────────────────────────────────────


def format_product_table(products: Sequence[Product]) -> str:
    """Format products as an ASCII table, in the given order.

    Columns: purchase date, name, category, monthly price, id.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Products ===")
    if not products:
        lines.append("  (no products yet, add one with 'add-product')")
        return "\n".join(lines)

    header = f"  {'Purchased':<10}  {'Name':<28}  {'Category':<18}  {'Price':>10}  {'ID':<36}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))
    for p in products:
        lines.append(
            f"  {p.purchase_date.isoformat():<10}  {p.name[:28]:<28}  "
            f"{category_label(p.category)[:18]:<18}  {_money(p.price):>10}  {p.id:<36}"
        )
    lines.append("")
    lines.append(f"  {len(products)} product(s), {_money(sum(p.price for p in products))}/month")
    return "\n".join(lines)


def format_product_detail(product: Product) -> str:
    """Format one product with its analysis."""
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== {product.name} ===")
    lines.append(f"  ID:         {product.id}")
    lines.append(f"  Category:   {category_label(product.category)}")
    lines.append(f"  Price:      {_money(product.price)}/month")
    lines.append(f"  Purchased:  {product.purchase_date.isoformat()}")
    if product.url:
        lines.append(f"  URL:        {product.url}")
    if product.description:
        lines.append(f"  About:      {product.description}")
    if product.tags:
        lines.append(f"  Tags:       {', '.join(product.tags)}")

    analysis = product.ai_analysis
    if analysis is not None:
        lines.append("")
        lines.append(f"  Analysis ({analysis.recommendation_score:.1f}/10): {analysis.summary}")
        for title, items in (("Pros", analysis.pros), ("Cons", analysis.cons)):
            if items:
                lines.append(f"    {title}:")
                lines.extend(f"      - {item}" for item in items)
    return "\n".join(lines)


# ── Recommendations ───────────────────────────────────────────────────────────


def format_purchase_content(content: ProductPurchaseContent) -> str:
    """Format a purchase verdict with its supporting signals."""
    alignment = content.goal_alignment
    budget = content.budget_analysis
    similarity = content.similarity_to_existing

    lines: list[str] = []
    tag = "[BUY]" if content.worth_buying else "[SKIP]"
    lines.append(f"  {tag} {content.recommendation}")
    lines.append("")
    lines.append(f"  Goal alignment:  {alignment.alignment_score:.1f}/10")
    if alignment.aligned_goals:
        lines.append(f"    aligned:    {', '.join(goal_label(g) for g in alignment.aligned_goals)}")
    if alignment.misaligned_goals:
        lines.append(f"    misaligned: {', '.join(goal_label(g) for g in alignment.misaligned_goals)}")
    if content.estimated_price is not None:
        lines.append(f"  Estimated price: {_money(content.estimated_price)}/month")
    lines.append(f"  Budget:          {budget.budget_impact}")
    if similarity.has_similar:
        lines.append("  Similar products you own:")
        for sp in similarity.similar_products:
            lines.append(f"    - {sp.name} (similarity {sp.similarity_score:.1f}/10)")
    if content.alternative_suggestions:
        lines.append("  Alternatives:")
        for alt in content.alternative_suggestions:
            url = f" <{alt.url}>" if alt.url else ""
            lines.append(f"    - {alt.name}{url}: {alt.reason}")
    return "\n".join(lines)


def format_insights(insights: UserInsights) -> str:
    """Format profile insights."""
    lines: list[str] = []
    lines.append(f"  Primary goal:   {insights.primary_goal}")
    lines.append(f"  Skill level:    {insights.skill_level}")
    lines.append(f"  Interest areas: {', '.join(insights.interest_areas)}")
    if insights.spending_patterns:
        lines.append("  Spending patterns:")
        lines.extend(f"    - {s}" for s in insights.spending_patterns)
    if insights.recommendations:
        lines.append("  Recommendations:")
        lines.extend(f"    - {s}" for s in insights.recommendations)
    return "\n".join(lines)


def format_recommendation(rec: AIRecommendation) -> str:
    """Format one stored recommendation (either variant)."""
    lines: list[str] = []
    lines.append("")
    status = "read" if rec.is_read else "unread"
    created = rec.created_at.strftime("%Y-%m-%d %H:%M") if rec.created_at else "?"
    lines.append(f"=== Recommendation {rec.id} ({status}, {created}) ===")
    if rec.purchase is not None:
        lines.append(format_purchase_content(rec.purchase))
    elif rec.insights is not None:
        lines.append(format_insights(rec.insights))
    return "\n".join(lines)


def format_recommendation_list(recs: Sequence[AIRecommendation]) -> str:
    """Format recommendations as a compact list, in the given order."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Recommendations ===")
    if not recs:
        lines.append("  (none)")
        return "\n".join(lines)

    for rec in recs:
        flag = " " if rec.is_read else "*"
        created = rec.created_at.strftime("%Y-%m-%d") if rec.created_at else "?"
        lines.append(f"  {flag} {created}  {_verdict(rec):<17}  {rec.id}")
    lines.append("")
    lines.append("  * = unread")
    return "\n".join(lines)


# ── Profile ───────────────────────────────────────────────────────────────────


def format_profile(profile: UserProfile) -> str:
    """Format a user profile."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Profile ===")
    lines.append(f"  Email:   {profile.email}")
    lines.append(f"  Name:    {profile.full_name or '-'}")
    budget = _money(profile.budget) + "/month" if profile.budget is not None else "not set"
    lines.append(f"  Budget:  {budget}")
    goals = ", ".join(goal_label(g) for g in profile.goals) or "none"
    lines.append(f"  Goals:   {goals}")
    if profile.ai_insights is not None:
        lines.append("")
        lines.append("  Latest insights:")
        lines.append(format_insights(profile.ai_insights))
    return "\n".join(lines)


# ── Dashboard ─────────────────────────────────────────────────────────────────


def format_dashboard(summary: DashboardSummary) -> str:
    """Format the dashboard overview."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Dashboard ===")
    lines.append(f"  Products:        {summary.product_count}")
    lines.append(f"  Monthly spend:   {_money(summary.total_monthly_spend)}")
    lines.append(f"  Unread recs:     {summary.unread_count}")

    if summary.category_breakdown:
        lines.append("")
        lines.append("  By category:")
        for cc in summary.category_breakdown:
            lines.append(f"    {category_label(cc.category):<20} {cc.count:>3}")

    lines.append("")
    lines.append("  Recent products:")
    if not summary.recent_products:
        lines.append("    (none)")
    for p in summary.recent_products:
        lines.append(
            f"    {p.purchase_date.isoformat()}  {p.name[:28]:<28}  {_money(p.price):>10}"
        )

    lines.append("")
    lines.append("  Recent recommendations:")
    if not summary.recent_recommendations:
        lines.append("    (none)")
    for rec in summary.recent_recommendations:
        flag = " " if rec.is_read else "*"
        lines.append(f"   {flag} {_verdict(rec):<17}  {rec.id}")
    return "\n".join(lines)


# ── Taxonomy ──────────────────────────────────────────────────────────────────


def format_taxonomy() -> str:
    """List every category and goal: value, label, description."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Categories ===")
    for category in ProductCategory:
        lines.append(
            f"  {category.value:<20} {CATEGORY_LABELS[category]:<20} "
            f"{CATEGORY_DESCRIPTIONS[category]}"
        )
    lines.append("")
    lines.append("=== Goals ===")
    for goal in UserGoal:
        lines.append(f"  {goal.value:<20} {GOAL_LABELS[goal]:<20} {GOAL_DESCRIPTIONS[goal]}")
    return "\n".join(lines)
