"""Pytest configuration and fixtures for all tests."""

import pytest

from nemoprefs.core.settings_reader import reset_mock_provider_for_testing


@pytest.fixture(autouse=True)
def reset_mock_provider():
    """Clear the process-wide mock override around every test.

    The override deliberately outlives reader instances, so without this a
    test that installs a mock would leak it into the tests that follow.
    """
    reset_mock_provider_for_testing()

    yield

    reset_mock_provider_for_testing()


@pytest.fixture
def provider_payload():
    """Factory for persisted provider dicts in the camelCase wire format."""

    def _make(provider_id: str = "openai-1", **overrides):
        payload = {
            "id": provider_id,
            "name": f"Provider {provider_id}",
            "type": "openai",
            "isDefault": False,
            "isBuiltIn": False,
            "baseUrl": "https://api.openai.com/v1",
            "apiKey": "sk-test",
            "modelId": "gpt-4o",
            "createdAt": "2024-05-01T10:00:00.000Z",
            "updatedAt": "2024-05-02T10:00:00.000Z",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def builtin_payload():
    return {
        "id": "nemo",
        "name": "Nemo",
        "type": "builtin",
        "isDefault": True,
        "isBuiltIn": True,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "updatedAt": "2024-05-01T10:00:00.000Z",
    }
