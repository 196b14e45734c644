"""
Tests Package

Test suite for the sitter trust and booking service.

Modules:
- test_algorithms: pure scoring, interval and slot functions
- test_trust_scorer: trust scoring with provider fallbacks
- test_availability: conflict detection, free windows, cache
- test_slot_recommender: time-slot suggestions
- test_booking_lifecycle: creation, transitions, cancel, reschedule, locking
- test_orchestrator: sitter ranking and timing
- test_api: FastAPI endpoints

Run all tests:
    pytest pawfect_ai/tests/

Run specific test file:
    pytest pawfect_ai/tests/test_algorithms.py -v
"""
