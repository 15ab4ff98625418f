"""Batch Markdown-to-HTML conversion tools."""
