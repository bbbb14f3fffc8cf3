"""
Notes Map Test Suite

Test Categories:
- Graph: store operations, reducer and invariants
- Viewport: transform math and gestures
- Layout: radial auto-arrange and the analysis template
- Persistence: codec, storage backends, TTL, debounce and sweep
- Reporting: minimap, card views and Mermaid export
- Editor: keyboard, import dialog, seeding and the CLI

Run all tests:
    pytest

Run specific test file:
    pytest tests/test_graph_store.py
"""

__version__ = "1.0.0"
