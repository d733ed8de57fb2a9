"""
Global pytest configuration and fixtures for QuiziAI tests

Provides:
- Test markers
- Sample configuration files
"""

import json

import pytest


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def json_config_file(tmp_path):
    """JSON config overriding a few defaults"""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "language": "English",
        "providers": {"groq": {"api_key": "file-groq-key", "temperature": 0.2}},
        "queue": {"target_size": 6},
        "logging": {"level": "debug"},
    }), encoding="utf-8")
    return path


@pytest.fixture
def yaml_config_file(tmp_path):
    """YAML config with the same shape"""
    path = tmp_path / "config.yaml"
    path.write_text(
        "use_mocks: true\n"
        "provider_order: [groq, gemini]\n"
        "providers:\n"
        "  gemini:\n"
        "    models: [gemini-2.5-pro]\n",
        encoding="utf-8",
    )
    return path
