"""Tests for saved generation settings."""

import json

import pytest

from exam_genius.config_store import STORAGE_KEY, ConfigStore
from exam_genius.schema import GenerationConfig, QuestionType


@pytest.fixture
def config_store(tmp_path):
    return ConfigStore(tmp_path / "nested" / "settings.json")


def test_load_without_saved_config(config_store):
    assert config_store.load() is None


def test_save_and_load(config_store):
    config = GenerationConfig(
        source_type="URL",
        content="https://example.com",
        difficulty="Hard",
        question_counts={"MULTIPLE_CHOICE": 10},
        page_count=2,
    )
    config_store.save(config)

    loaded = config_store.load()
    assert loaded == config


def test_stored_as_string_under_key(config_store):
    config_store.save(GenerationConfig(content="x"))
    raw = json.loads(config_store.path.read_text(encoding="utf-8"))
    assert isinstance(raw[STORAGE_KEY], str)
    assert json.loads(raw[STORAGE_KEY])["sourceType"] == "TEXT"


def test_partial_saved_config_merged_with_defaults(config_store):
    config_store.path.parent.mkdir(parents=True)
    config_store.path.write_text(json.dumps({STORAGE_KEY: json.dumps({"difficulty": "Easy"})}), encoding="utf-8")

    loaded = config_store.load()
    assert loaded.difficulty == "Easy"
    assert loaded.source_type == "TEXT"
    assert loaded.question_counts[QuestionType.MULTIPLE_CHOICE] == 4


def test_other_keys_preserved(config_store):
    config_store.path.parent.mkdir(parents=True)
    config_store.path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    config_store.save(GenerationConfig(content="x"))
    raw = json.loads(config_store.path.read_text(encoding="utf-8"))
    assert raw["theme"] == "dark"
    assert STORAGE_KEY in raw


def test_clear(config_store):
    config_store.save(GenerationConfig(content="x"))
    config_store.clear()
    assert config_store.load() is None


def test_default_path_from_settings(tmp_path):
    assert ConfigStore().path == tmp_path / "settings.json"
