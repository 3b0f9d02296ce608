"""Scenario identifiers shared by the integration tests.

The stored family in conftest.mock_storage_data uses these IDs, and every
integration test runs with the clock frozen at FROZEN_NOW.
"""

# Monday 2024-01-15, 12:00 in the test instance's US/Pacific time zone
FROZEN_NOW = "2024-01-15T20:00:00+00:00"
TODAY = "2024-01-15"

PARENT_ID = "parent-one"
ALICE_ID = "student-alice"
BEN_ID = "student-ben"

# One-time, due Friday 2024-01-12, assigned to Alice
MATH_ID = "assignment-math"
# Weekly on Monday and Wednesday from 2024-01-08, assigned to Alice and Ben
READING_ID = "assignment-reading"
