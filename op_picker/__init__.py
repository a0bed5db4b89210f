"""
op-picker - Python Package

Pick 1Password items with fzf, copy secrets to the clipboard for a bounded
window, and keep the op session cached between invocations.
"""

__version__ = "1.0.0"
__author__ = "op-picker developers"
__description__ = "Timed clipboard access to 1Password secrets through fzf"

__all__ = [
  "__version__",
]
