import pytest

from csv_json_converter.sections import SectionRegistry


def test_default_registry_has_main_section():
    registry = SectionRegistry()
    assert registry.ids() == ["main"]
    assert registry.resolve("anything") == "main"


def test_add_trims_name_and_derives_id():
    registry = SectionRegistry()
    section = registry.add("  My Section ")

    assert section.name == "My Section"
    assert section.id.startswith("my_section_")
    assert section.removable is True
    assert registry.sections[-1] is section


def test_add_blank_name_is_noop():
    registry = SectionRegistry()
    assert registry.add("   ") is None
    assert registry.add("") is None
    assert len(registry.sections) == 1


def test_added_ids_are_unique():
    registry = SectionRegistry()
    ids = {registry.add("extra").id for _ in range(5)}
    assert len(ids) == 5


def test_rename_keeps_id_and_assignments():
    registry = SectionRegistry()
    extra = registry.add("extra")
    registry.assign("Age", extra.id)

    assert registry.rename(extra.id, "details")
    assert registry.get(extra.id).name == "details"
    assert registry.assignments == {"age": extra.id}
    assert registry.section_for("age").name == "details"


def test_remove_reassigns_columns_to_new_first_section():
    registry = SectionRegistry()
    extra = registry.add("extra")
    registry.assign("name", "main")
    registry.assign("age", extra.id)

    assert registry.remove("main")

    assert registry.ids() == [extra.id]
    assert registry.assignments == {"name": extra.id, "age": extra.id}


def test_remove_non_first_section_falls_back_to_first():
    registry = SectionRegistry()
    extra = registry.add("extra")
    registry.assign("age", extra.id)

    assert registry.remove(extra.id)
    assert registry.assignments == {"age": "main"}
    assert all(registry.get(target) for target in registry.assignments.values())


def test_remove_last_section_is_refused():
    registry = SectionRegistry()
    assert registry.remove("main") is False
    assert registry.ids() == ["main"]


def test_remove_unknown_section_is_noop():
    registry = SectionRegistry()
    registry.add("extra")
    assert registry.remove("nope") is False
    assert len(registry.sections) == 2


def test_assign_unknown_section_raises():
    registry = SectionRegistry()
    with pytest.raises(ValueError):
        registry.assign("age", "missing")


def test_assign_empty_id_clears_entry():
    registry = SectionRegistry()
    extra = registry.add("extra")
    registry.assign("age", extra.id)
    registry.assign("AGE", "")
    assert registry.assignments == {}
    assert registry.resolve("age") == "main"


def test_empty_registry_synthesizes_fallback():
    registry = SectionRegistry(sections=[])
    assert registry.resolve("x") == "main"
    assert registry.ids() == ["main"]

