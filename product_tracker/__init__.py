"""Product Tracker: track purchased marketing tools and score new purchases."""

__version__ = "0.1.0"
