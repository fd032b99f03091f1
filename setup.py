"""Setuptools build hooks for namedarray."""

from __future__ import annotations

from setuptools import setup

# Metadata lives in pyproject.toml. The package is pure Python, so the default
# command classes are left alone and wheels come out as ``py3-none-any``.
setup()
