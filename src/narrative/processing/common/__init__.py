"""Shared processing helpers."""

from narrative.processing.common.llm import create_model

__all__ = ["create_model"]
