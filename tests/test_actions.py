"""Confirmed deletes and leave approvals with injected prompts."""
from typing import List, Optional

import pytest

from teamhub.actions import confirm_delete, delete_prompt, transition_leave
from teamhub.core.errors import ValidationError
from teamhub.core.config import Settings
from teamhub.repositories import Repositories, build_repositories


class Prompt:
    def __init__(self, answer: bool = True, reason: Optional[str] = None) -> None:
        self.answer = answer
        self.reason = reason
        self.messages: List[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer

    def ask(self, message: str) -> Optional[str]:
        self.messages.append(message)
        return self.reason


@pytest.mark.asyncio
async def test_delete_runs_after_yes(repos: Repositories) -> None:
    await repos.departments.load()
    prompt = Prompt(answer=True)

    assert await confirm_delete(repos.departments, 4, prompt.confirm, "department") is True
    assert prompt.messages == ["Are you sure you want to delete this department?"]
    assert repos.departments.find(4) is None


@pytest.mark.asyncio
async def test_profile_delete_warns_it_is_permanent(repos: Repositories) -> None:
    await repos.employees.load()
    prompt = Prompt(answer=True)

    assert await confirm_delete(repos.employees, 5, prompt.confirm, "employee", permanent=True) is True
    assert prompt.messages == [
        "Are you sure you want to delete this employee? This action cannot be undone."
    ]
    assert delete_prompt("employee") == "Are you sure you want to delete this employee?"


@pytest.mark.asyncio
async def test_delete_skipped_after_no(repos: Repositories) -> None:
    await repos.leaves.load()

    assert await confirm_delete(repos.leaves, 1, Prompt(answer=False).confirm, "leave request") is False
    assert repos.leaves.find(1) is not None


@pytest.mark.asyncio
async def test_approve_pending_request(repos: Repositories) -> None:
    await repos.leaves.load()
    leave = repos.leaves.find(3)

    updated = await transition_leave(repos.leaves, leave, "Approved", Prompt().confirm, approver="Alice")

    assert updated.status == "Approved"
    assert updated.approved_by == "Alice"
    assert repos.leaves.find(3).status == "Approved"


@pytest.mark.asyncio
async def test_reject_with_reason(repos: Repositories) -> None:
    await repos.leaves.load()
    prompt = Prompt(reason="  Release week  ")

    updated = await transition_leave(
        repos.leaves, repos.leaves.find(6), "Rejected", prompt.confirm, prompt.ask, approver="Alice"
    )

    assert updated.status == "Rejected"
    assert updated.rejection_reason == "Release week"
    assert prompt.messages[0] == "Are you sure you want to reject this leave request?"


@pytest.mark.asyncio
async def test_reject_with_blank_reason_stores_none(repos: Repositories) -> None:
    await repos.leaves.load()
    prompt = Prompt(reason="")

    updated = await transition_leave(
        repos.leaves, repos.leaves.find(6), "Rejected", prompt.confirm, prompt.ask, approver="Alice"
    )
    assert updated.rejection_reason is None


@pytest.mark.asyncio
async def test_cancelled_prompts_change_nothing(repos: Repositories) -> None:
    await repos.leaves.load()
    leave = repos.leaves.find(3)

    assert await transition_leave(repos.leaves, leave, "Approved", Prompt(answer=False).confirm, approver="Alice") is None
    cancel_reason = Prompt(reason=None)
    assert await transition_leave(
        repos.leaves, leave, "Rejected", cancel_reason.confirm, cancel_reason.ask, approver="Alice"
    ) is None
    assert repos.leaves.find(3).status == "Pending"


@pytest.mark.asyncio
async def test_decided_requests_cannot_transition(repos: Repositories) -> None:
    await repos.leaves.load()
    prompt = Prompt()

    with pytest.raises(ValidationError):
        await transition_leave(repos.leaves, repos.leaves.find(1), "Rejected", prompt.confirm, approver="Alice")
    assert prompt.messages == []


@pytest.mark.asyncio
async def test_approver_is_the_user_the_app_was_started_with() -> None:
    repos = build_repositories(
        Settings(backend="mock", current_user="Dana Ops", mock_latency_min=0, mock_latency_max=0)
    )
    await repos.leaves.load()

    updated = await transition_leave(
        repos.leaves, repos.leaves.find(3), "Approved", Prompt().confirm, approver=repos.settings.current_user
    )

    assert repos.settings.current_user == "Dana Ops"
    assert updated.approved_by == "Dana Ops"
