from tutorgroups.store.base import AggregateStore
from tutorgroups.store.memory import InMemoryStore

__all__ = ["AggregateStore", "InMemoryStore"]
