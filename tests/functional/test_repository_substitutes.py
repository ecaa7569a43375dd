"""Functional tests for substitute data access."""

from __future__ import annotations

import pytest

from template_store.logic import repository_substitutes as repo
from template_store.logic import repository_templates as templates
from template_store.logic.errors import (
    CheckViolation,
    ForeignKeyViolation,
    NotNullViolation,
    UniqueViolation,
)
from template_store.models.ordering import OrderBy, SortOrder


def test_round_trip_substitute(engine):
    t1 = templates.create_template("t1")
    s1 = repo.create_substitute(t1.id, "s1")

    read_back = repo.read_substitute_by_id(s1.id)
    assert read_back is not None
    assert read_back.name == "s1"
    assert read_back.template_id == t1.id
    assert repo.read_substitute_by_name("t1", "s1") == read_back


def test_substitute_requires_existing_template(engine):
    with pytest.raises(ForeignKeyViolation):
        repo.create_substitute(999999, "orphan")
    assert repo.read_substitutes_containing("orphan") == []


def test_duplicate_substitute_in_same_template_is_rejected(engine):
    t = templates.create_template("template")
    repo.create_substitute(t.id, "substitute_collision")
    with pytest.raises(UniqueViolation):
        repo.create_substitute(t.id, "substitute_collision")


def test_same_substitute_text_under_two_templates(engine):
    a = templates.create_template("a")
    b = templates.create_template("b")
    first = repo.create_substitute(a.id, "shared")
    second = repo.create_substitute(b.id, "shared")
    assert first.id != second.id
    assert (first.template_id, second.template_id) == (a.id, b.id)


def test_substitute_text_is_unrestricted_but_capped(engine):
    t = templates.create_template("anything")
    assert repo.create_substitute(t.id, "Any Text, with: punctuation!").template_id == t.id
    assert len(repo.create_substitute(t.id, "x" * 16000).name) == 16000
    with pytest.raises(CheckViolation):
        repo.create_substitute(t.id, "y" * 16001)


def test_substitute_fields_are_required(engine):
    t = templates.create_template("required")
    with pytest.raises(NotNullViolation):
        repo.create_substitute(t.id, None)  # type: ignore[arg-type]
    with pytest.raises(NotNullViolation):
        repo.create_substitute(None, "text")  # type: ignore[arg-type]


def test_add_substitutes_creates_template(engine):
    created = repo.add_substitutes("example", ["a", "b", "c", "d"]).updated
    template = templates.read_template_by_name("example")
    assert template is not None
    assert [s.name for s in created] == ["a", "b", "c", "d"]
    assert {s.template_id for s in created} == {template.id}


def test_add_substitutes_is_all_or_nothing(engine):
    with pytest.raises(CheckViolation):
        repo.add_substitutes("atomic", ["one", "two", "z" * 16001])
    assert templates.read_template_by_name("atomic") is None
    assert repo.read_substitutes_containing("one") == []


def test_add_substitutes_reports_texts_already_present(engine):
    repo.add_substitutes("fruit", ["apple"])

    record = repo.add_substitutes("fruit", ["apple", "pear", "pear", "plum"])

    assert [s.name for s in record.updated] == ["pear", "plum"]
    assert record.ignored == ["apple", "pear"]
    names = [s.name for s in repo.read_substitutes_from_template("fruit")]
    assert names == ["apple", "pear", "plum"]


def test_add_single_substitute_rejects_duplicate(engine):
    repo.add_substitute("fruit", "apple")
    with pytest.raises(UniqueViolation):
        repo.add_substitute("fruit", "apple")


def test_add_substitutes_rejects_invalid_template_name(engine):
    with pytest.raises(CheckViolation):
        repo.add_substitute("Bad Name", "value")


def test_read_substitutes_from_template_ordering(engine):
    repo.add_substitutes("fruit", ["banana", "Cherry", "apple"])

    default = [s.name for s in repo.read_substitutes_from_template("fruit")]
    assert default == ["banana", "Cherry", "apple"]

    ignore_case = repo.read_substitutes_from_template("fruit", OrderBy.NAME_IGNORE_CASE, SortOrder.ASC)
    assert [s.name for s in ignore_case] == ["apple", "banana", "Cherry"]

    newest = repo.read_substitutes_from_template("fruit", OrderBy.ID, SortOrder.DESC, limit=1)
    assert [s.name for s in newest] == ["apple"]


def test_read_substitutes_by_template_id_matches_by_name(engine):
    created = repo.add_substitutes("animal", ["cat", "dog"]).updated
    template_id = created[0].template_id
    assert repo.read_substitutes_by_template_id(template_id) == repo.read_substitutes_from_template("animal")
    assert repo.read_substitutes_from_template("no_such_template") == []


def test_update_substitute_by_id(engine):
    created = repo.add_substitutes("animal", ["cat", "dog", "bat"]).updated
    for sub in created:
        updated = repo.update_substitute_by_id(sub.id, sub.name.upper())
        assert updated is not None
        assert updated.name == sub.name.upper()
        assert updated.template_id == sub.template_id
    assert repo.update_substitute_by_id(999999, "nothing") is None


def test_update_substitute_by_name(engine):
    repo.add_substitute("fruit", "banana")
    apple = repo.update_substitute_by_name("fruit", "banana", "apple")
    assert apple is not None and apple.name == "apple"
    assert repo.read_substitute_by_name("fruit", "banana") is None
    assert repo.update_substitute_by_name("fruit", "banana", "kiwi") is None


def test_update_substitute_collision(engine):
    repo.add_substitutes("fruit", ["apple", "pear"])
    with pytest.raises(UniqueViolation):
        repo.update_substitute_by_name("fruit", "pear", "apple")


def test_delete_substitute_has_no_side_effects(engine):
    keep, drop = repo.add_substitutes("pair", ["keep", "drop"]).updated
    assert repo.delete_substitute_by_id(drop.id) is True
    assert repo.delete_substitute_by_id(drop.id) is False
    assert repo.read_substitute_by_id(keep.id) == keep
    assert templates.read_template_by_id(keep.template_id) is not None


def test_delete_substitutes_by_id(engine):
    created = repo.add_substitutes("computer_part", ["mouse", "keyboard", "monitor", "microphone"]).updated
    assert repo.delete_substitutes_by_id([s.id for s in created]) == 4
    assert repo.read_substitutes_from_template("computer_part") == []
    assert repo.delete_substitutes_by_id([]) == 0


def test_delete_substitutes_by_name(engine):
    names = ["mouse", "keyboard", "monitor", "microphone"]
    repo.add_substitutes("computer_part", names)
    other = repo.add_substitute("rodent", "mouse")

    record = repo.delete_substitutes_by_name("computer_part", names + ["trackball"])
    assert record is not None
    assert sorted(s.name for s in record.updated) == sorted(names)
    assert record.ignored == ["trackball"]
    assert repo.read_substitutes_from_template("computer_part") == []
    assert repo.read_substitute_by_id(other.id) == other
    assert repo.delete_substitute_by_name("rodent", "mouse") is True
    assert repo.delete_substitute_by_name("rodent", "mouse") is False
    assert repo.delete_substitutes_by_name("no_such_template", ["mouse"]) is None
    assert repo.delete_substitute_by_name("no_such_template", "mouse") is False


def test_copy_substitutes_skips_existing_text(engine):
    repo.add_substitutes("source", ["x", "y"])
    repo.add_substitute("target", "y")

    assert repo.copy_substitutes("source", "target") == 1
    assert sorted(s.name for s in repo.read_substitutes_from_template("target")) == ["x", "y"]
    assert repo.copy_substitutes("source", "target") == 0


def test_copy_substitutes_creates_target_and_requires_source(engine):
    repo.add_substitutes("source", ["x"])
    assert repo.copy_substitutes("source", "fresh") == 1
    assert templates.read_template_by_name("fresh") is not None
    assert repo.copy_substitutes("missing", "fresh") is None


def test_read_substitutes_containing_is_case_sensitive(engine):
    repo.add_substitutes("t", ["The ^adj fox", "the ^ADJ dog", "100% sure", "a_b"])
    assert [s.name for s in repo.read_substitutes_containing("^adj")] == ["The ^adj fox"]
    assert [s.name for s in repo.read_substitutes_containing("%")] == ["100% sure"]
    assert [s.name for s in repo.read_substitutes_containing("_")] == ["a_b"]


def test_listing_search_narrows_to_one_template(engine):
    repo.add_substitutes("animal", ["Cat", "cat food", "dog", "bobcat", "100%_cat"])
    repo.add_substitute("other", "cat")

    found = repo.read_substitutes_from_template("animal", search="cat")
    assert [s.name for s in found] == ["cat food", "bobcat", "100%_cat"]

    first = repo.read_substitutes_from_template("animal", OrderBy.NAME, SortOrder.ASC, limit=1, search="cat")
    assert [s.name for s in first] == ["100%_cat"]

    template_id = found[0].template_id
    assert repo.read_substitutes_by_template_id(template_id, search="%_") == [found[2]]
    assert repo.read_substitutes_by_template_id(template_id, search="zebra") == []
