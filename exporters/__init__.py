"""Exporters for converting graph to various output formats."""

from .mermaid_exporter import to_mermaid
from .ascii_exporter import to_ascii
from .json_exporter import to_json
from .sdl_exporter import to_sdl

__all__ = ["to_mermaid", "to_ascii", "to_json", "to_sdl"]
