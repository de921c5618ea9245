"""Shared pytest fixtures for the full ScholarVoice test suite."""

from __future__ import annotations

import pytest


@pytest.fixture
def academic_document() -> str:
    """Provide a short paper with a preamble and three structural sections."""

    return (
        "Motivation in Online Learning\n"
        "J. Doe and R. Roe\n\n"
        "Abstract\n\n"
        "We study how autonomy shapes persistence (Deci, 2020).\n\n"
        "Introduction:\n\n"
        "Self-determination theory (Ryan and Deci, 2000) predicts engagement.\n"
        "Prior work focused on classrooms.\n\n"
        "Results\n\n"
        "Autonomy support raised completion rates."
    )
