"""RBAC action registry and per-role defaults."""
from __future__ import annotations

from typing import Literal

Action = Literal[
    "groups.create",
    "groups.view",
    "students.add",
    "students.remove",
    "students.view",
    "attendance.open_round",
    "attendance.confirm",
    "payments.record",
    "payments.reverse",
    "fees.configure",
    "scores.record",
    "scores.view",
    "scores.configure",
    "assistants.register",
]

SYSTEM_ACTIONS: list[dict[str, str]] = [
    {"key": "groups.create", "name": "Create groups"},
    {"key": "groups.view", "name": "View groups and rounds"},
    {"key": "students.add", "name": "Add students"},
    {"key": "students.remove", "name": "Remove students"},
    {"key": "students.view", "name": "View student details"},
    {"key": "attendance.open_round", "name": "Open attendance rounds"},
    {"key": "attendance.confirm", "name": "Confirm attendance"},
    {"key": "payments.record", "name": "Record payments"},
    {"key": "payments.reverse", "name": "Reverse payments"},
    {"key": "fees.configure", "name": "Configure fee amounts"},
    {"key": "scores.record", "name": "Record, edit and delete scores"},
    {"key": "scores.view", "name": "View scores"},
    {"key": "scores.configure", "name": "Set max and redo scores"},
    {"key": "assistants.register", "name": "Register assistants"},
]


def _all_actions() -> set[str]:
    return {action["key"] for action in SYSTEM_ACTIONS}


DEFAULT_ROLE_PERMISSIONS: dict[str, set[str]] = {
    "teacher": _all_actions(),
    "assistant": _all_actions() - {"assistants.register"},
}


def has_permission(role: str, action: str) -> bool:
    return action in DEFAULT_ROLE_PERMISSIONS.get(role, set())
