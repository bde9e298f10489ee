"""
Tests for the Gemini fallback generator, with the client replaced by a fake.
"""

import json
from types import SimpleNamespace

import pytest

from theme_amender.generator import (
    MULTI_VALUE_NOTE,
    GeminiThemeGenerator,
    GeneratorError,
    extract_json,
)


class FakeModels:
    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        return SimpleNamespace(text=self.replies.pop(0))


def make_generator(*replies):
    models = FakeModels(replies)
    return GeminiThemeGenerator(client=SimpleNamespace(models=models)), models


class TestExtractJson:
    def test_plain(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert extract_json('```json\n[{"op": "remove", "path": "/a"}]\n```') == [
            {"op": "remove", "path": "/a"}
        ]
        assert extract_json('```\n{"a": 1}\n```') == {"a": 1}

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty(self, text):
        with pytest.raises(GeneratorError, match="Empty"):
            extract_json(text)

    def test_not_json(self):
        with pytest.raises(GeneratorError, match="not valid JSON"):
            extract_json("Sure! Here is your palette.")


class TestGeminiThemeGenerator:
    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(GeneratorError, match="GEMINI_API_KEY"):
            GeminiThemeGenerator()

    def test_regenerate(self, baseline):
        subtree = {"spacing": baseline["spacing"]}
        gen, models = make_generator(json.dumps({"spacing": {"md": "18px"}}))
        assert gen.regenerate("airier", subtree) == {"spacing": {"md": "18px"}}
        request = models.requests[0]
        assert request["model"] == gen.model
        assert "airier" in request["contents"]
        assert '"md": "16px"' in request["contents"]

    def test_regenerate_rejects_non_object(self):
        gen, _ = make_generator("[1, 2, 3]")
        with pytest.raises(GeneratorError, match="object"):
            gen.regenerate("airier", {"spacing": {}})

    def test_propose_patch_returns_raw_reply(self):
        reply = [{"op": "replace", "path": "/colors/brand/500", "value": "#112233"}]
        gen, models = make_generator(json.dumps(reply))
        assert gen.propose_patch("deeper brand", ["/colors/brand"], {}) == reply
        prompt = models.requests[0]["contents"]
        assert '["/colors/brand"]' in prompt
        assert MULTI_VALUE_NOTE not in prompt

    def test_multi_value_note(self):
        gen, models = make_generator("[]")
        gen.propose_patch("brand teal and accent coral", ["/colors/brand", "/colors/accent"], {})
        assert MULTI_VALUE_NOTE in models.requests[0]["contents"]

    def test_generate_theme_is_validated(self, baseline):
        gen, _ = make_generator(json.dumps(baseline))
        assert gen.generate_theme("calm fintech") == baseline

        broken = dict(baseline, colors={"accent": baseline["colors"]["accent"]})
        gen, _ = make_generator(json.dumps(broken))
        with pytest.raises(ValueError):
            gen.generate_theme("calm fintech")
