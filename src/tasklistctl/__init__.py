"""tasklistctl: hierarchical task lists, templates, tags and attributes."""

__version__ = "0.1.0"
