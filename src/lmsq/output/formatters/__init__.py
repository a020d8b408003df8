"""Renderers, one per output mode."""

from .base import Renderer
from .json import JsonRenderer, RawJsonRenderer
from .pretty import PrettyRenderer
from .text import TextRenderer

__all__ = ["JsonRenderer", "PrettyRenderer", "RawJsonRenderer", "Renderer", "TextRenderer"]
