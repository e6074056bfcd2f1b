from __future__ import annotations

import pytest

from src.payroll_system.payroll_system.teachers.model import Teacher
from tests.fakes import InMemoryAdvances, InMemoryLoans, InMemorySalaries, InMemoryTeachers, make_teacher


@pytest.fixture
def teacher() -> Teacher:
    return make_teacher()


@pytest.fixture
def teachers_repo(teacher) -> InMemoryTeachers:
    return InMemoryTeachers(teacher)


@pytest.fixture
def loans_repo() -> InMemoryLoans:
    return InMemoryLoans()


@pytest.fixture
def advances_repo() -> InMemoryAdvances:
    return InMemoryAdvances()


@pytest.fixture
def salaries_repo(loans_repo) -> InMemorySalaries:
    return InMemorySalaries(loans_repo)
