"""Serverless entry point: re-exports the Collaboration Graph Explorer API."""
import os
import sys

# Ensure repo root is on sys.path
_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _ROOT)

from backend.main import app

__all__ = ["app"]
