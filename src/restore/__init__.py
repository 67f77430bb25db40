# src/restore/__init__.py — v1
