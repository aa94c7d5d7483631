"""Tests for photostudio.core.presets — features, styles and UI text."""

from __future__ import annotations

import pytest

from photostudio.core import presets
from photostudio.core.presets import FeatureKey, StyleKey


class TestFeatures:
    """Feature tab definitions."""

    def test_tab_order(self):
        keys = [f["key"] for f in presets.features("en")]
        assert keys == [
            "text-to-photo",
            "image-to-photo",
            "image-fusion",
            "ai-model",
            "edit-photo",
        ]

    def test_only_text_to_photo_needs_no_image(self):
        needs = {f["key"]: f["requiresImage"] for f in presets.features("en")}
        assert [key for key, value in needs.items() if not value] == ["text-to-photo"]

    @pytest.mark.parametrize("language", ["en", "vi"])
    def test_localized_fields_present(self, language):
        for feature in presets.features(language):
            assert feature["title"]
            assert feature["description"]
            assert feature["promptPlaceholder"]

    def test_unknown_language_falls_back_to_english(self):
        assert presets.features("fr") == presets.features("en")


class TestStyles:
    """Style presets."""

    def test_default_style_has_no_prompt(self):
        assert presets.style_prompt(StyleKey.NONE, "en") == ""

    def test_style_prompt(self):
        assert presets.style_prompt(StyleKey.PORTRAIT, "en") == (
            "close-up portrait, depth of field, bokeh"
        )

    def test_vietnamese_style_prompt(self):
        assert presets.style_prompt(StyleKey.WATERCOLOR, "vi").startswith("tranh màu nước")

    def test_every_style_listed(self):
        assert {s["key"] for s in presets.styles("vi")} == {key.value for key in StyleKey}


class TestUiText:
    """Localized UI strings."""

    def test_languages_share_keys(self):
        assert set(presets.UI_TEXT["en"]) == set(presets.UI_TEXT["vi"])

    def test_ui_text_fallback(self):
        assert presets.ui_text("xx")["title"] == "AI Photo Studio"

    @pytest.mark.parametrize(("language", "locale"), [("en", "en-US"), ("vi", "vi-VN")])
    def test_speech_locale(self, language, locale):
        assert presets.speech_locale(language) == locale

    def test_aspect_ratios(self):
        assert presets.ASPECT_RATIOS == ("1:1", "16:9", "9:16", "4:3", "3:4")
        assert presets.DEFAULT_ASPECT_RATIO == "1:1"

    def test_requires_image(self):
        assert presets.requires_image(FeatureKey.IMAGE_FUSION) is True
        assert presets.requires_image(FeatureKey.TEXT_TO_PHOTO) is False
