"""Tests for CommandHistoryRepository against a mocked Supabase client."""
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from database.repositories.history_repo import CommandHistoryRepository
from models.intent import IntentRecord
from services.assistant_service import AssistantService


@pytest.fixture
def supabase():
    return MagicMock()


@pytest.fixture
def repo(supabase):
    return CommandHistoryRepository(supabase)


@pytest.mark.asyncio
async def test_append_calls_trimming_function(repo, supabase):
    uid = uuid4()
    supabase.rpc.return_value.execute.return_value = MagicMock(data=[{"id": 7, "command": "hi"}])

    row = await repo.append(uid, "hi", limit=100, response="Hello", intent_type="general")

    supabase.rpc.assert_called_once_with("append_command_history", {
        "p_user_id": str(uid),
        "p_command": "hi",
        "p_response": "Hello",
        "p_intent_type": "general",
        "p_limit": 100,
    })
    assert row == {"id": 7, "command": "hi"}


@pytest.mark.asyncio
async def test_append_returns_none_for_empty_result(repo, supabase):
    supabase.rpc.return_value.execute.return_value = MagicMock(data=[])
    assert await repo.append(uuid4(), "hi", limit=100) is None


@pytest.mark.asyncio
async def test_append_propagates_database_errors(repo, supabase):
    supabase.rpc.return_value.execute.side_effect = RuntimeError("connection reset")
    with pytest.raises(RuntimeError):
        await repo.append(uuid4(), "hi", limit=100)


@pytest.mark.asyncio
async def test_list_recent_orders_newest_first(repo, supabase):
    uid = uuid4()
    query = supabase.table.return_value.select.return_value.eq.return_value
    query.order.return_value.limit.return_value.execute.return_value = MagicMock(
        data=[{"command": "b"}, {"command": "a"}]
    )

    rows = await repo.list_recent(uid, 20)

    supabase.table.assert_called_once_with("command_history")
    supabase.table.return_value.select.return_value.eq.assert_called_once_with("user_id", str(uid))
    query.order.assert_called_once_with("created_at", desc=True)
    query.order.return_value.limit.assert_called_once_with(20)
    assert [r["command"] for r in rows] == ["b", "a"]


# ---------------------------------------------------------------------------
# Bounded log through the assistant service
# ---------------------------------------------------------------------------

class InMemoryHistoryStore:
    """Supabase stand-in whose ``append_command_history`` mirrors the SQL function:
    insert, then keep only the newest ``p_limit`` rows of that user."""

    def __init__(self):
        self.rows = []
        self._next_id = 1

    def rpc(self, name, params):
        assert name == "append_command_history"
        store = self

        class _Call:
            def execute(self):
                row = {
                    "id": store._next_id,
                    "user_id": params["p_user_id"],
                    "command": params["p_command"],
                    "response": params["p_response"],
                    "intent_type": params["p_intent_type"],
                }
                store._next_id += 1
                store.rows.append(row)
                mine = [r for r in store.rows if r["user_id"] == params["p_user_id"]]
                keep = {r["id"] for r in mine[-max(params["p_limit"], 1):]}
                store.rows = [
                    r for r in store.rows
                    if r["user_id"] != params["p_user_id"] or r["id"] in keep
                ]
                return MagicMock(data=[row])

        return _Call()

    def commands(self, user_id):
        return [r["command"] for r in self.rows if r["user_id"] == str(user_id)]


@pytest.mark.asyncio
async def test_history_keeps_newest_hundred_commands_per_user():
    store = InMemoryHistoryStore()
    classifier = MagicMock()
    classifier.classify = AsyncMock(
        return_value=IntentRecord(type="general", userInput="x", response="ok")
    )
    service = AssistantService(classifier, CommandHistoryRepository(store))
    ada = {"id": str(uuid4()), "name": "Ada", "assistant_name": "Jarvis"}
    bob = {"id": str(uuid4()), "name": "Bob", "assistant_name": "Friday"}

    await service.ask(bob, "bob's only command")
    for i in range(105):
        await service.ask(ada, f"command {i}")

    ada_commands = store.commands(ada["id"])
    assert len(ada_commands) == 100
    # Oldest evicted first, insertion order preserved
    assert ada_commands[0] == "command 5"
    assert ada_commands[-1] == "command 104"
    assert store.commands(bob["id"]) == ["bob's only command"]
