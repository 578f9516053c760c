"""Tests for the in-memory exam store."""

import pytest

from exam_genius import editor
from exam_genius.store import ExamStore


class TestExamStore:
    def test_add_and_get(self, sample_exam, text_config):
        store = ExamStore()
        record = store.add(sample_exam, text_config)
        assert store.get(record.exam_id) is record
        assert record.config == text_config
        assert record.created_at == record.updated_at

    def test_ids_are_unique(self, sample_exam):
        store = ExamStore()
        assert store.add(sample_exam).exam_id != store.add(sample_exam).exam_id

    def test_put_replaces_exam(self, sample_exam):
        store = ExamStore()
        record = store.add(sample_exam)
        edited = editor.update_header(sample_exam, "title", "ریاضی")

        updated = store.put(record.exam_id, edited)
        assert updated.exam.header.title == "ریاضی"
        assert store.get(record.exam_id).exam.header.title == "ریاضی"
        assert updated.updated_at >= updated.created_at

    def test_unknown_id(self, sample_exam):
        store = ExamStore()
        with pytest.raises(KeyError):
            store.get("missing")
        with pytest.raises(KeyError):
            store.put("missing", sample_exam)

    def test_only_add_get_put_exposed(self):
        public = {name for name in vars(ExamStore) if not name.startswith("_")}
        assert public == {"add", "get", "put"}
