"""Infrastructure adapters.

Adapters implement protocols defined in core/protocols/.
Each adapter wraps one boundary of the live data pipeline (document store,
downstream store, metrics).
"""
