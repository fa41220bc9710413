"""Core logic for the CSV to JSON Converter.

The Gradio UI lives in `app.py`. This package contains pure functions that:
- parse CSV lines and headers
- route columns into named sections
- build record titles from patterns
- export JSON and the CSV envelope
"""
