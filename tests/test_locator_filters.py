"""Tests for entity lookup and task filtering."""

from datetime import datetime, timezone

from omnifocus_mcp.models.entities import ProjectModel, TagModel, TaskModel
from omnifocus_mcp.models.options import FilterSet
from omnifocus_mcp.utils.filters import CompiledFilter, compile_filters, evaluate
from omnifocus_mcp.utils.locator import NotFound, find_entity, lookup

from .conftest import FIXED_NOW, SAMPLE_PROJECTS, SAMPLE_TAGS, SAMPLE_TASKS

UTC = timezone.utc

TASKS = [TaskModel.model_validate(t) for t in SAMPLE_TASKS]
PROJECTS = [ProjectModel.model_validate(p) for p in SAMPLE_PROJECTS]
TAGS = [TagModel.model_validate(t) for t in SAMPLE_TAGS]


def _ids(tasks):
    return [t.id for t in tasks]


def _run(**filters):
    compiled = compile_filters(FilterSet(**filters), projects=PROJECTS, tags=TAGS, now=FIXED_NOW)
    assert isinstance(compiled, CompiledFilter)
    return _ids(evaluate(TASKS, compiled, None))


class TestFindEntity:
    """Tests for find_entity / lookup."""

    def test_by_id(self):
        assert find_entity(PROJECTS, "p2").name == "Home"

    def test_by_exact_name(self):
        assert find_entity(PROJECTS, "Home").id == "p2"

    def test_name_match_is_case_sensitive(self):
        assert find_entity(PROJECTS, "home") is None

    def test_id_wins_over_earlier_name(self):
        projects = [
            ProjectModel(id="a", name="b"),
            ProjectModel(id="b", name="Other"),
        ]
        assert find_entity(projects, "b").id == "b"

    def test_first_name_match_wins(self):
        projects = [ProjectModel(id="x", name="Dup"), ProjectModel(id="y", name="Dup")]
        assert find_entity(projects, "Dup").id == "x"

    def test_empty_identifier(self):
        assert find_entity(PROJECTS, "") is None
        assert find_entity(PROJECTS, None) is None

    def test_lookup_miss(self):
        miss = lookup(PROJECTS, "Nope", "Project")
        assert isinstance(miss, NotFound)
        assert miss.message == "Project not found: Nope"


class TestFilters:
    """Tests for compile_filters / evaluate."""

    def test_empty_filter_excludes_completed_only(self):
        assert _run() == ["t1", "t2", "t3", "t5"]

    def test_include_completed(self):
        assert _run(include_completed=True) == ["t1", "t2", "t3", "t4", "t5", "t6"]

    def test_empty_filter_respects_limit(self):
        compiled = compile_filters(FilterSet(), now=FIXED_NOW)
        assert _ids(evaluate(TASKS, compiled, 2)) == ["t1", "t2"]

    def test_zero_limit(self):
        compiled = compile_filters(FilterSet(), now=FIXED_NOW)
        assert evaluate(TASKS, compiled, 0) == []

    def test_flagged(self):
        assert _run(flagged=True) == ["t2"]

    def test_project_by_name(self):
        assert _run(project="Home") == ["t3", "t5"]

    def test_tag(self):
        assert _run(tag="phone") == ["t3"]

    def test_predicates_compose_with_and(self):
        assert _run(project="Home", query="trip") == ["t5"]
        assert _run(project="Work", tag="phone") == []

    def test_query_matches_note_case_insensitively(self):
        assert _run(query="FLIGHTS") == ["t5"]

    def test_due_window_keeps_undated_tasks(self):
        assert _run(due_before="tomorrow") == ["t1", "t2", "t3"]

    def test_require_due_drops_undated_tasks(self):
        assert _run(due_before="tomorrow", require_due=True) == ["t2"]

    def test_due_after(self):
        assert _run(due_after="+2d", require_due=True) == ["t5"]

    def test_defer_window_drops_undeferred_tasks(self):
        assert _run(defer_before="today") == ["t3"]

    def test_available_skips_future_defer_and_blocked(self):
        tasks = [
            TaskModel(id="a", name="later", defer_date=datetime(2024, 6, 20, tzinfo=UTC)),
            TaskModel(id="b", name="blocked", blocked=True),
            TaskModel(id="c", name="ready"),
        ]
        compiled = compile_filters(FilterSet(available=True), now=FIXED_NOW)
        assert _ids(evaluate(tasks, compiled, None)) == ["c"]

    def test_unparseable_date_bound_is_ignored(self):
        assert _run(due_before="whenever") == ["t1", "t2", "t3", "t5"]

    def test_unknown_project(self):
        compiled = compile_filters(FilterSet(project="NoSuchProject"), projects=PROJECTS, now=FIXED_NOW)
        assert isinstance(compiled, NotFound)
        assert compiled.message == "Project not found: NoSuchProject"

    def test_unknown_tag(self):
        compiled = compile_filters(FilterSet(tag="nope"), tags=TAGS, now=FIXED_NOW)
        assert isinstance(compiled, NotFound)
        assert compiled.kind == "Tag"
