"""Tests for models.yaml loading and per-stage ModelConfig merging."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from code_graph.config import ModelConfig, Settings, _load_models_yaml, get_model_config, settings


@pytest.fixture(autouse=True)
def _reset_cache():
    import code_graph.config as cfg
    cfg._models_config_cache = None
    yield
    cfg._models_config_cache = None


def _use_yaml(path):
    return patch.dict("os.environ", {"MODELS_CONFIG_PATH": str(path)})


def test_indexer_settings_defaults():
    s = Settings(_env_file=None)
    assert s.indexer_extensions == [".ts", ".tsx", ".js", ".jsx"]
    assert "node_modules" in s.indexer_exclude_patterns
    assert s.retrieval_top_k == 5
    assert s.max_context_chars == 0


def test_settings_read_from_environment():
    with patch.dict("os.environ", {"RETRIEVAL_TOP_K": "3", "INDEXER_EXTENSIONS": '[".ts"]'}):
        s = Settings(_env_file=None)
    assert s.retrieval_top_k == 3
    assert s.indexer_extensions == [".ts"]


def test_model_config_defaults():
    mc = ModelConfig()
    assert mc.model == ""
    assert mc.temperature is None
    assert mc.max_tokens is None


def test_missing_yaml_is_empty(tmp_path):
    with _use_yaml(tmp_path / "nope.yaml"):
        assert _load_models_yaml() == {}


def test_empty_yaml_is_empty(tmp_path):
    (tmp_path / "models.yaml").write_text("")
    with _use_yaml(tmp_path / "models.yaml"):
        assert _load_models_yaml() == {}


def test_yaml_is_cached(tmp_path):
    yaml_file = tmp_path / "models.yaml"
    yaml_file.write_text("default:\n  model: m1\n")
    with _use_yaml(yaml_file):
        first = _load_models_yaml()
        yaml_file.write_text("default:\n  model: m2\n")
        second = _load_models_yaml()
    assert first is second
    assert second["default"]["model"] == "m1"


def test_no_yaml_falls_back_to_settings(tmp_path):
    with _use_yaml(tmp_path / "missing.yaml"):
        mc = get_model_config("planner")
    assert mc.model == settings.llm_model
    assert mc.base_url == settings.llm_base_url
    assert mc.temperature is None


PLANNER_YAML = (
    "default:\n"
    "  model: openai/gpt-4.1-mini\n"
    "  temperature: 0.2\n"
    "  base_url: https://openrouter.ai/api/v1\n"
    "agents:\n"
    "  planner:\n"
    "    model: openai/gpt-4.1\n"
    "    max_tokens: 2000\n"
)


def test_planner_override_merges_with_default(tmp_path):
    (tmp_path / "m.yaml").write_text(PLANNER_YAML)
    with _use_yaml(tmp_path / "m.yaml"):
        mc = get_model_config("planner")
    assert mc.model == "openai/gpt-4.1"
    assert mc.max_tokens == 2000
    assert mc.temperature == 0.2
    assert mc.base_url == "https://openrouter.ai/api/v1"


def test_stage_without_override_gets_default(tmp_path):
    (tmp_path / "m.yaml").write_text(PLANNER_YAML)
    with _use_yaml(tmp_path / "m.yaml"):
        mc = get_model_config("summarizer")
    assert mc.model == "openai/gpt-4.1-mini"
    assert mc.max_tokens is None


def test_unknown_override_keys_are_ignored(tmp_path):
    (tmp_path / "m.yaml").write_text("agents:\n  planner:\n    model: x\n    top_p: 0.5\n")
    with _use_yaml(tmp_path / "m.yaml"):
        mc = get_model_config("planner")
    assert mc.model == "x"
    assert not hasattr(mc, "top_p")


def test_llm_service_uses_model_config(monkeypatch):
    from code_graph.services.llm_service import LLMService

    monkeypatch.setattr(settings, "llm_api_key", "test")

    svc = LLMService(config=ModelConfig(model="test-model", temperature=0.0, base_url="https://example.com/v1"))
    assert svc.model == "test-model"
    assert svc._get_temperature() == 0.0
    assert LLMService(config=ModelConfig(model="m", base_url="https://example.com/v1"))._get_temperature() == 0.2
