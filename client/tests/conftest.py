"""Shared test fixtures and configuration."""
import sys
import os

# Ensure the client package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
