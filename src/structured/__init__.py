# src/structured/__init__.py — v1
