"""
Core blob-handling logic.

This module is framework-agnostic - it doesn't import FastAPI or any
storage SDK. Route handlers and storage backends both depend on it, never
the other way round, so the gateway can be tested against an in-memory
store.
"""
