# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
import os
import pytest

from src.config import API_KEY_VARS, DEFAULT_MODELS
from src.llm.providers import create_provider
from src.types.llm_types import Provider

# Enable asyncio support for pytest
pytest_plugins = ["pytest_asyncio"]


def pytest_addoption(parser):
    parser.addoption(
        "--run-llm",
        action="store_true",
        default=False,
        help="Run tests marked with 'uses_llm' against the real provider APIs",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "uses_llm: calls a real LLM provider (needs --run-llm and an API key)"
    )


# Skip tests that spend API credits unless they were asked for
def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-llm"):
        return
    skip_llm = pytest.mark.skip(reason="need --run-llm option to run")
    for item in items:
        if "uses_llm" in item.keywords:
            item.add_marker(skip_llm)


@pytest.fixture
def live_provider(request):
    """A real provider adapter for the parametrized provider name.

    The model can be overridden with AGENT_MODEL; the test is skipped when the
    provider's API key is not in the environment.
    """
    provider = Provider(request.param)
    api_key = os.getenv(API_KEY_VARS[provider])
    if not api_key:
        pytest.skip(f"{API_KEY_VARS[provider]} is not set")
    model = os.getenv("AGENT_MODEL") or DEFAULT_MODELS[provider]
    return create_provider(provider, api_key, model)
