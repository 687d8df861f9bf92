import pathlib

import pytest

EXAMPLES_DIR = pathlib.Path(__file__).resolve().parent.parent / 'examples'


@pytest.fixture
def example_path():
    def resolve(name: str) -> pathlib.Path:
        return EXAMPLES_DIR / name
    return resolve


@pytest.fixture
def example_source(example_path):
    def load(name: str) -> str:
        with open(example_path(name), 'r', encoding='utf-8') as f:
            return f.read()
    return load
