"""Authenticated principals and the teacher they act for."""
from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    TEACHER = "teacher"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Principal:
    principal_id: str
    role: UserRole


@dataclass(frozen=True)
class Actor:
    """A principal resolved against the store.

    A teacher acts for itself; an assistant for the teacher that employs it.
    """

    principal_id: str
    role: UserRole
    teacher_id: str
    name: str = ""
