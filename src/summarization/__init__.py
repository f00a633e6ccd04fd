# src/summarization/__init__.py — v1
