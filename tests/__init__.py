"""
Test Suite

Structure:
- tests/unit/: Component tests with the venue HTTP layer mocked

Uses pytest with pytest-asyncio for testing async functionality.
"""
