"""
Repository package for data access layers.

`app.repositories.topics` holds the reference store used by video delivery;
routes obtain it through the `get_reference_store` dependency so tests can
override it with an in-memory fake.
"""
