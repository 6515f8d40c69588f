"""
Product category and user goal taxonomy.

Two closed enumerations describe what a user buys and why:
  - ``ProductCategory``: the *what*: what kind of product is this?
  - ``UserGoal``       : the *why*:  which marketing objective is it for?

Labels and one-line descriptions live in the ``*_LABELS`` and
``*_DESCRIPTIONS`` maps so the CLI can render help text without hard-coding
strings per command.

This module has NO imports from any other ``product_tracker`` package.
"""

from enum import StrEnum


class ProductCategory(StrEnum):
    """Kind of marketing product a user has purchased."""

    COURSE = "course"
    """Educational content with structured lessons."""

    SOFTWARE = "software"
    """Applications, tools, or platforms."""

    EBOOK = "ebook"
    """Digital books or guides."""

    MEMBERSHIP = "membership"
    """Recurring access to content or community."""

    COACHING = "coaching"
    """Personal guidance or mentorship."""

    PHYSICAL_PRODUCT = "physical_product"
    """Tangible items shipped to customers."""

    SERVICE = "service"
    """Done-for-you work or assistance."""

    TEMPLATE = "template"
    """Pre-designed files or frameworks."""

    PLUGIN = "plugin"
    """Add-ons for existing platforms."""

    OTHER = "other"
    """Anything that does not fit the categories above."""


class UserGoal(StrEnum):
    """Marketing objective a user is pursuing."""

    MAIN_BUSINESS = "main_business"
    SIDE_HUSTLE = "side_hustle"
    PASSIVE_INCOME = "passive_income"
    RETIREMENT_PROJECT = "retirement_project"
    SKILL_DEVELOPMENT = "skill_development"
    AUDIENCE_BUILDING = "audience_building"
    E_COMMERCE = "e_commerce"
    CONTENT_CREATION = "content_creation"
    AFFILIATE_MARKETING = "affiliate_marketing"
    OTHER = "other"


CATEGORY_LABELS: dict[ProductCategory, str] = {
    ProductCategory.COURSE:           "Course",
    ProductCategory.SOFTWARE:         "Software",
    ProductCategory.EBOOK:            "E-Book",
    ProductCategory.MEMBERSHIP:       "Membership",
    ProductCategory.COACHING:         "Coaching",
    ProductCategory.PHYSICAL_PRODUCT: "Physical Product",
    ProductCategory.SERVICE:          "Service",
    ProductCategory.TEMPLATE:         "Template",
    ProductCategory.PLUGIN:           "Plugin/Extension",
    ProductCategory.OTHER:            "Other",
}

CATEGORY_DESCRIPTIONS: dict[ProductCategory, str] = {
    ProductCategory.COURSE:           "Educational content with structured lessons",
    ProductCategory.SOFTWARE:         "Applications, tools, or platforms",
    ProductCategory.EBOOK:            "Digital books or guides",
    ProductCategory.MEMBERSHIP:       "Recurring access to content or community",
    ProductCategory.COACHING:         "Personal guidance or mentorship",
    ProductCategory.PHYSICAL_PRODUCT: "Tangible items shipped to customers",
    ProductCategory.SERVICE:          "Done-for-you work or assistance",
    ProductCategory.TEMPLATE:         "Pre-designed files or frameworks",
    ProductCategory.PLUGIN:           "Add-ons for existing platforms",
    ProductCategory.OTHER:            "Other types of products",
}

GOAL_LABELS: dict[UserGoal, str] = {
    UserGoal.MAIN_BUSINESS:       "Main Business",
    UserGoal.SIDE_HUSTLE:         "Side Hustle",
    UserGoal.PASSIVE_INCOME:      "Passive Income",
    UserGoal.RETIREMENT_PROJECT:  "Retirement Project",
    UserGoal.SKILL_DEVELOPMENT:   "Skill Development",
    UserGoal.AUDIENCE_BUILDING:   "Audience Building",
    UserGoal.E_COMMERCE:          "E-Commerce",
    UserGoal.CONTENT_CREATION:    "Content Creation",
    UserGoal.AFFILIATE_MARKETING: "Affiliate Marketing",
    UserGoal.OTHER:               "Other",
}

GOAL_DESCRIPTIONS: dict[UserGoal, str] = {
    UserGoal.MAIN_BUSINESS:       "Building or growing a primary business",
    UserGoal.SIDE_HUSTLE:         "Creating additional income streams",
    UserGoal.PASSIVE_INCOME:      "Building automated income sources",
    UserGoal.RETIREMENT_PROJECT:  "Post-career ventures or hobbies",
    UserGoal.SKILL_DEVELOPMENT:   "Learning new marketing abilities",
    UserGoal.AUDIENCE_BUILDING:   "Growing followers or subscribers",
    UserGoal.E_COMMERCE:          "Selling products online",
    UserGoal.CONTENT_CREATION:    "Producing blogs, videos, or podcasts",
    UserGoal.AFFILIATE_MARKETING: "Earning commissions from promotions",
    UserGoal.OTHER:               "Other marketing goals",
}


def category_label(value: str) -> str:
    """Return the display label for a category value, or the value itself."""
    try:
        return CATEGORY_LABELS[ProductCategory(value)]
    except ValueError:
        return value


def goal_label(value: str) -> str:
    """Return the display label for a goal value, or the value itself."""
    try:
        return GOAL_LABELS[UserGoal(value)]
    except ValueError:
        return value
