"""Tests for templates.py and the single-default invariant."""

from dataclasses import replace

import pytest

from dailyreport.exceptions import TemplateNotFoundError
from dailyreport.models import Template
from dailyreport.store import ReportStore
from dailyreport.templates import TemplateStore


@pytest.fixture
def templates(tmp_path):
    return TemplateStore(ReportStore(tmp_path / "db.json"))


def _defaults(templates):
    return [t.name for t in templates.list() if t.is_default]


class TestSave:
    """Tests for TemplateStore.save."""

    def test_append_and_list(self, templates):
        templates.save(Template.new("a", "A"))
        templates.save(Template.new("b", "B"))
        assert [t.name for t in templates.list()] == ["a", "b"]

    def test_upsert_by_id(self, templates):
        t = Template.new("a", "A")
        templates.save(t)
        templates.save(replace(t, content="changed"))
        assert len(templates.list()) == 1
        assert templates.find_by_name("a").content == "changed"

    def test_default_clears_others(self, templates):
        templates.save(Template.new("a", "A", is_default=True))
        templates.save(Template.new("b", "B", is_default=True))
        assert _defaults(templates) == ["b"]

    @pytest.mark.parametrize(
        "initial",
        [
            [False, False, False],
            [True, False, False],
            [False, True, True],
            [True, True, True],
        ],
    )
    def test_exactly_one_default_from_any_state(self, templates, initial):
        """Even a hand-edited document with several defaults ends with one."""
        store = templates.store
        data = store.read_document()
        data["settings"]["templates"] = [
            Template(id=f"id{i}", name=f"t{i}", content="x", is_default=flag).to_dict()
            for i, flag in enumerate(initial)
        ]
        store.write_document(data)

        chosen = templates.find_by_name("t1")
        templates.save(replace(chosen, is_default=True))

        assert _defaults(templates) == ["t1"]

    def test_non_default_save_keeps_existing_default(self, templates):
        templates.save(Template.new("a", "A", is_default=True))
        templates.save(Template.new("b", "B"))
        assert _defaults(templates) == ["a"]

    def test_reports_untouched(self, templates):
        data = templates.store.read_document()
        data["reports"] = [{"id": "r", "date": "2024-06-01"}]
        templates.store.write_document(data)
        templates.save(Template.new("a", "A"))
        assert templates.store.read_document()["reports"] == [{"id": "r", "date": "2024-06-01"}]


class TestLookup:
    """Tests for lookups."""

    def test_find_by_name_missing(self, templates):
        assert templates.find_by_name("nope") is None

    def test_find_by_name_first_match(self, templates):
        first = Template.new("dup", "first")
        templates.save(first)
        templates.save(Template.new("dup", "second"))
        assert templates.find_by_name("dup").id == first.id

    def test_find_by_id(self, templates):
        t = Template.new("a", "A")
        templates.save(t)
        assert templates.find_by_id(t.id) == t

    def test_find_default_none(self, templates):
        templates.save(Template.new("a", "A"))
        assert templates.find_default() is None


class TestSetDefault:
    """Tests for set_default."""

    def test_switches_default(self, templates):
        templates.save(Template.new("a", "A", is_default=True))
        templates.save(Template.new("b", "B"))
        templates.set_default("b")
        assert templates.find_default().name == "b"
        assert _defaults(templates) == ["b"]

    def test_unknown_name_raises(self, templates):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            templates.set_default("missing")
        assert exc_info.value.name == "missing"


class TestDelete:
    """Tests for delete."""

    def test_delete_existing(self, templates):
        t = Template.new("a", "A")
        templates.save(t)
        assert templates.delete(t.id) is True
        assert templates.list() == []

    def test_delete_missing(self, templates):
        assert templates.delete("nope") is False
