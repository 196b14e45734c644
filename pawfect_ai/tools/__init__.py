"""
Tools Package

Collaborator interfaces and their implementations.

Interfaces:
- data_store.DataStore: sitter, pet and booking records
- insight_provider.ExternalInsightProvider: optional language-model judgements
- notifier.Notifier: typed booking events

Implementations:
- backend_store.BackendDataStore: marketplace backend over httpx
- memory_store.InMemoryDataStore: dict-backed store for local runs and tests
- insight_provider.LLMInsightProvider / DeterministicInsightProvider
- notifier.HttpNotifier

NOTE: httpx clients are created lazily on first use; importing this package
opens no connections.
"""

from pawfect_ai.tools.data_store import DataStore
from pawfect_ai.tools.insight_provider import (
    DeterministicInsightProvider,
    ExternalInsightProvider,
    LLMInsightProvider
)
from pawfect_ai.tools.memory_store import InMemoryDataStore
from pawfect_ai.tools.notifier import HttpNotifier, Notifier

__all__ = [
    "DataStore",
    "DeterministicInsightProvider",
    "ExternalInsightProvider",
    "LLMInsightProvider",
    "InMemoryDataStore",
    "HttpNotifier",
    "Notifier",
]
