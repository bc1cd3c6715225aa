"""Tests for the shared workflow layer."""

from dataclasses import replace
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from taskcal.adapters.gemini_api import GeminiSuggestionProvider
from taskcal.adapters.memory_store import MemoryTaskStore
from taskcal.breakdown import BreakdownOrchestrator
from taskcal.config import DATA_DIR, Config
from taskcal.core.breakdown import BreakdownResult, SubtaskProposal
from taskcal.core.tasks import Priority, TaskDraft, TaskType
from taskcal.errors import NotFoundError, ValidationError
from taskcal.workflows import (
    add_task,
    edit_task,
    get_orchestrator,
    get_store,
    load_agenda,
    propose_breakdown,
    replace_with_breakdown,
    toggle_complete,
    user_filter,
)


@pytest.fixture
def config(tmp_path):
    return Config(data_file=str(tmp_path / "tasks.json"), user_id="u1")


@pytest.fixture
def store():
    return MemoryTaskStore()


class TestGetStore:
    def test_uses_configured_file(self, config, tmp_path):
        assert get_store(config).path == tmp_path / "tasks.json"

    def test_falls_back_to_default(self):
        assert get_store(Config()).path == DATA_DIR / "tasks.json"


class TestGetOrchestrator:
    def test_offline_without_key(self):
        assert get_orchestrator(Config()).provider is None

    def test_placeholder_key_is_ignored(self):
        assert get_orchestrator(Config(gemini_api_key="your-gemini-api-key")).provider is None

    def test_gemini_when_configured(self):
        orchestrator = get_orchestrator(Config(gemini_api_key="k", breakdown_timeout=5.0))
        assert isinstance(orchestrator.provider, GeminiSuggestionProvider)
        assert orchestrator.timeout == 5.0


class TestUserFilter:
    def test_scopes_to_user(self, config):
        task_filter = user_filter(config, task_type=TaskType.PERIOD)
        assert task_filter.user_id == "u1"
        assert task_filter.task_type == TaskType.PERIOD

    def test_no_user(self):
        assert user_filter(Config()).user_id is None


class TestTaskActions:
    @pytest.mark.asyncio
    async def test_add_returns_stored_task(self, store):
        task = await add_task(store, TaskDraft(title="Call mom", start_date="2024-06-01"))
        assert task.id
        assert await store.get(task.id) == task

    @pytest.mark.asyncio
    async def test_edit(self, store):
        task = await add_task(store, TaskDraft(title="Call mom", start_date="2024-06-01"))
        edited = await edit_task(store, task.id, {"priority": "high"})
        assert edited.priority == Priority.HIGH

    @pytest.mark.asyncio
    async def test_toggle_complete_flips(self, store):
        task = await add_task(store, TaskDraft(title="Call mom", start_date="2024-06-01"))
        assert (await toggle_complete(store, task.id)).completed is True
        assert (await toggle_complete(store, task.id)).completed is False

    @pytest.mark.asyncio
    async def test_toggle_missing(self, store):
        with pytest.raises(NotFoundError):
            await toggle_complete(store, "nope")


class TestLoadAgenda:
    @pytest.mark.asyncio
    async def test_assembles_for_user(self, store, config):
        await add_task(store, TaskDraft(title="Late", start_date="2024-06-01", due_date="2024-06-01", user_id="u1"))
        await add_task(store, TaskDraft(title="Soon", start_date="2024-06-03", due_date="2024-06-04", user_id="u1"))
        await add_task(store, TaskDraft(title="Other", start_date="2024-06-03", due_date="2024-06-01", user_id="u2"))

        agenda = await load_agenda(store, config, date(2024, 6, 3))

        assert [t.title for t in agenda.on_day] == ["Soon"]
        assert [t.title for t in agenda.overdue] == ["Late"]
        assert [t.title for t in agenda.due_soon] == ["Soon"]
        assert agenda.summary.overdue_count == 1

    @pytest.mark.asyncio
    async def test_defaults_to_today(self, store, config):
        agenda = await load_agenda(store, config)
        assert agenda.day == date.today()


class TestBreakdown:
    @pytest.fixture
    def result(self):
        return BreakdownResult(
            subtasks=[
                SubtaskProposal("Research", "", 1, Priority.HIGH),
                SubtaskProposal("Write", "", 2, Priority.MEDIUM, ["Research"]),
            ],
            suggestions=["Keep notes"],
        )

    @pytest.mark.asyncio
    async def test_propose_uses_orchestrator(self, store, result):
        task = await add_task(store, TaskDraft(title="Essay", start_date="2024-06-01"))
        orchestrator = BreakdownOrchestrator()

        with patch.object(orchestrator, "request_breakdown", AsyncMock(return_value=result)) as mock_request:
            found, proposal = await propose_breakdown(store, orchestrator, task.id)

        mock_request.assert_awaited_once_with(task)
        assert found == task
        assert proposal is result

    @pytest.mark.asyncio
    async def test_propose_missing_task(self, store):
        with pytest.raises(NotFoundError):
            await propose_breakdown(store, BreakdownOrchestrator(), "nope")

    @pytest.mark.asyncio
    async def test_replace_swaps_original(self, store, result):
        original = await add_task(
            store, TaskDraft(title="Essay", start_date="2024-06-01", due_date="2024-06-10", user_id="u1")
        )

        created = await replace_with_breakdown(store, original, result)

        remaining = await store.list()
        assert {t.id for t in remaining} == {t.id for t in created}
        assert sorted(t.title for t in remaining) == ["Research", "Write"]
        assert all(t.due_date == "2024-06-10" for t in remaining)
        assert all(t.user_id == "u1" for t in remaining)
        with pytest.raises(NotFoundError):
            await store.get(original.id)

    @pytest.mark.asyncio
    async def test_replace_staggered(self, store, result):
        original = await add_task(store, TaskDraft(title="Essay", start_date="2024-06-01"))
        created = await replace_with_breakdown(store, original, result, stagger=True)
        assert [(t.start_date, t.due_date) for t in created] == [
            ("2024-06-01", "2024-06-01"),
            ("2024-06-02", "2024-06-03"),
        ]

    @pytest.mark.asyncio
    async def test_invalid_breakdown_keeps_original(self, store, result):
        original = await add_task(store, TaskDraft(title="Essay", start_date="2024-06-01"))
        broken = replace(original, start_date="garbage")

        with pytest.raises(ValidationError):
            await replace_with_breakdown(store, broken, result)

        assert (await store.get(original.id)).title == "Essay"
