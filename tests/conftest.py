import pytest

from a11y_auditor.config import CheckOptions


@pytest.fixture
def options():
    return CheckOptions()


@pytest.fixture
def aaa_options():
    return CheckOptions(wcag_level='AAA')
