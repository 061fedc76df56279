"""Static prompt catalogs loaded from ``data/prompts.json``.

The catalog maps user-facing labels to opaque instruction strings:

- ``styles``: art style transformations (one may be selected per edit)
- ``processes``: restoration steps (any number may be selected; the
  ``upscale`` process additionally triggers a local upscale)
- ``image_categories``: prompt templates for original image ideas

The file is read once at startup and the resulting :class:`PromptCatalog`
is immutable.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .validation import ValidationError

logger = logging.getLogger(__name__)

UPSCALE_PROCESS_ID = "upscale"


@dataclass(frozen=True)
class PromptEntry:
    """A selectable style or process."""

    id: str
    label: str
    prompt: str


@dataclass(frozen=True)
class CategoryEntry:
    """An image category used when suggesting original image prompts."""

    id: str
    label: str
    role: str
    template: str


@dataclass(frozen=True)
class PromptCatalog:
    styles: tuple[PromptEntry, ...]
    processes: tuple[PromptEntry, ...]
    image_categories: tuple[CategoryEntry, ...]

    @classmethod
    def load(cls, path: Path) -> PromptCatalog:
        """Read the catalog from *path*.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid catalog JSON
        """
        with open(path, encoding="utf-8") as f:
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Prompt catalog {path} is not valid JSON: {e}") from e

        try:
            catalog = cls(
                styles=tuple(PromptEntry(**entry) for entry in raw.get("styles", [])),
                processes=tuple(PromptEntry(**entry) for entry in raw.get("processes", [])),
                image_categories=tuple(
                    CategoryEntry(**entry) for entry in raw.get("image_categories", [])
                ),
            )
        except TypeError as e:
            raise ValueError(f"Prompt catalog {path} has a malformed entry: {e}") from e

        logger.info(
            f"Loaded prompt catalog from {path}: {len(catalog.styles)} styles, "
            f"{len(catalog.processes)} processes, {len(catalog.image_categories)} categories"
        )
        return catalog

    def get_style(self, style_id: str) -> PromptEntry:
        return _lookup(self.styles, style_id, "style")

    def get_process(self, process_id: str) -> PromptEntry:
        return _lookup(self.processes, process_id, "process")

    def get_category(self, category_id: str) -> CategoryEntry:
        return _lookup(self.image_categories, category_id, "image category")

    def to_dict(self) -> dict:
        """Serialise labels and ids for the ``/api/config`` endpoint."""
        return {
            "styles": [{"id": s.id, "label": s.label} for s in self.styles],
            "processes": [{"id": p.id, "label": p.label} for p in self.processes],
            "image_categories": [{"id": c.id, "label": c.label} for c in self.image_categories],
        }


def _lookup(entries, entry_id: str, kind: str):
    entry = next((e for e in entries if e.id == entry_id), None)
    if entry is None:
        available = ", ".join(e.id for e in entries)
        raise ValidationError(f"Unknown {kind} '{entry_id}'. Available: {available}")
    return entry
