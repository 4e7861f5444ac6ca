"""UI-agnostic segmented editors for date/time and angle values."""

__all__ = [
    "adapters",
    "bounds",
    "domains",
    "engine",
    "fields",
    "input",
    "keymaps",
    "runtime",
]

__version__ = "0.1.0"
