"""CLI helper functions."""

from .prompt import ask_yes_no, make_confirm

__all__ = ['ask_yes_no', 'make_confirm']
