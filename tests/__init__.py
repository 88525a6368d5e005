"""GTD Bot Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - tasks/: Task models, repository, lifecycle engine, statistics
  - activity/: Activity log recording and export
  - channels/: Command dispatcher and per-user serialization
  - automation/: Weekly reminder hook

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/tasks/

    # With coverage
    pytest --cov=gtdbot --cov-report=term-missing
"""
