"""Tests for atelier.core.catalog - the static prompt catalog."""

from __future__ import annotations

import json

import pytest

from atelier.core.catalog import UPSCALE_PROCESS_ID, PromptCatalog
from atelier.core.validation import ValidationError


class TestPackagedCatalog:
    """Test the catalog shipped in atelier/data/prompts.json."""

    def test_has_styles_processes_and_categories(self, catalog):
        """Test that the packaged catalog has every section populated."""
        assert len(catalog.styles) == 20
        assert {p.id for p in catalog.processes} == {
            "restore",
            "colorize",
            "colorize-sketch",
            UPSCALE_PROCESS_ID,
        }
        assert catalog.get_category("default").label == "Default"

    def test_ids_are_unique(self, catalog):
        """Test that no id repeats within a section."""
        for entries in (catalog.styles, catalog.processes, catalog.image_categories):
            ids = [e.id for e in entries]
            assert len(ids) == len(set(ids))

    def test_lookup(self, catalog):
        """Test that a style is found by id."""
        assert catalog.get_style("oil-painting").prompt.startswith("Recreate the entire scene")

    def test_unknown_style_raises(self, catalog):
        """Test that an unknown style id raises ValidationError."""
        with pytest.raises(ValidationError, match="Unknown style 'anime'"):
            catalog.get_style("anime")

    def test_to_dict_hides_prompts(self, catalog):
        """Test that the public dictionary exposes ids and labels only."""
        data = catalog.to_dict()
        assert set(data) == {"styles", "processes", "image_categories"}
        assert "prompt" not in data["styles"][0]


class TestLoad:
    """Tests for reading catalog files."""

    def test_missing_file_raises(self, temp_dir):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            PromptCatalog.load(temp_dir / "missing.json")

    def test_invalid_json_raises(self, temp_dir):
        """Test that invalid JSON raises ValueError."""
        path = temp_dir / "prompts.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            PromptCatalog.load(path)

    def test_malformed_entry_raises(self, temp_dir):
        """Test that an entry missing fields raises ValueError."""
        path = temp_dir / "prompts.json"
        path.write_text(json.dumps({"styles": [{"id": "x"}]}))
        with pytest.raises(ValueError, match="malformed"):
            PromptCatalog.load(path)

    def test_missing_sections_default_to_empty(self, temp_dir):
        """Test that absent sections load as empty tuples."""
        path = temp_dir / "prompts.json"
        path.write_text("{}")
        catalog = PromptCatalog.load(path)
        assert catalog.styles == ()
