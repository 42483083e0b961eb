# See https://docs.pytest.org/en/7.1.x/example/simple.html
import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line('markers', 'fast: quick tests which do not need any external resources')
