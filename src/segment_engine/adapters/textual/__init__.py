"""Textual host: key translation, UI hooks and the demo app."""

from .controller import TEXTUAL_KEYS, TextualSegmentAdapter, TextualUIHooks, normalize_textual_key

__all__ = ["TEXTUAL_KEYS", "TextualSegmentAdapter", "TextualUIHooks", "normalize_textual_key"]
