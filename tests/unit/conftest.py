import pytest

from helpers import SAMPLE_LINE


@pytest.fixture
def sample_line() -> str:
    return SAMPLE_LINE
