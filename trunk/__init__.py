"""Layered configuration, build hooks, dist management and a clean command for WASM web apps."""

__version__ = "0.16.0"