"""
Template layout: the configured tour block and its validation.

The block position is fixed per report template; ``locate_template_block``
only confirms that the configured rows hold at least one placeholder.
"""

from layout.constants import DEFAULT_TOKENS, TemplateLayout, load_layout
from layout.locator import locate_template_block, select_template_sheet

__all__ = [
    "DEFAULT_TOKENS",
    "TemplateLayout",
    "load_layout",
    "locate_template_block",
    "select_template_sheet",
]
