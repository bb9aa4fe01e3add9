"""Shared fixtures for the collector tests."""

from __future__ import annotations

import pytest

from testivus import GrievanceStore


class FakeCase:
    """Stand-in for a running test."""

    def __init__(self, name: str):
        self.name = name
        self.failures: list[str] = []

    def fail(self, reason: str) -> None:
        self.failures.append(reason)


@pytest.fixture
def make_case():
    return FakeCase


@pytest.fixture
def store() -> GrievanceStore:
    return GrievanceStore()


@pytest.fixture
def scenario_a(store: GrievanceStore) -> GrievanceStore:
    """Three grievances under test A."""
    store.record("A", "My son tells me your company stinks!")
    store.record("A", "You're slow!", "speed")
    store.record("A", "You're sending too much data!", "speed", "download")
    return store


@pytest.fixture
def scenario_b(scenario_a: GrievanceStore) -> GrievanceStore:
    """Scenario A plus one error-bearing grievance under test B."""
    scenario_a.record("B", "You're slow again!", "speed").set_error("timeout exceeded")
    return scenario_a
