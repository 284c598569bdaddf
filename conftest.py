"""
Shared pytest configuration.

Running ``pytest`` from the repository root puts this directory on
``sys.path``, so ``from src...`` imports resolve without installation.
"""

import pytest

from src.core.diagnostics import RecordingDiagnostics
from src.core.sections import DesignSection
from src.design.settings import SolverSettings


@pytest.fixture
def settings():
    """Default solver settings."""
    return SolverSettings()


@pytest.fixture
def diagnostics():
    """Sink that records every message."""
    return RecordingDiagnostics()


@pytest.fixture
def beam_section():
    """300x500 mm section with default covers (usable width 230 mm)."""
    return DesignSection(section_id="S1_Mid", width=300, height=500, req_top=3.0, req_bot=8.0)
