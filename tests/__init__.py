"""
OpenTTD Admin Client Test Suite

This package contains tests for the OpenTTD admin port client.

Directory Structure:
    unit/        - Pure unit tests for individual functions (fast, no I/O)
    async/       - Async tests with mocked StreamReader/StreamWriter
    integration/ - Integration tests across multiple modules

Running Tests:
    # Run all tests
    pytest

    # Run specific test directory
    pytest tests/unit
    pytest tests/async
    pytest tests/integration

    # Run tests matching a pattern
    pytest -k test_name_pattern

    # Run with specific markers
    pytest -m unit
    pytest -m async_test
    pytest -m integration

Test Markers:
    @pytest.mark.unit         - Fast unit tests (no I/O)
    @pytest.mark.async_test   - Async tests with mocked I/O
    @pytest.mark.integration  - Integration tests (cross-module)
    @pytest.mark.network      - Tests requiring network mocking

Fixtures:
    Shared fixtures are defined in conftest.py and include:
    - Mock network streams (mock_stream_reader, mock_stream_writer)
    - Component instances (game_state, admin_client)
    - Sample packet data (sample_welcome_payload)
    - Utility helpers (packet_builder)
"""
