"""
Core Package.

Contains the infrastructure the analysis runs on:
- PHP Lexer and Token Stream
- Fixer (textual edits)
- Diagnostics and Trace Logging
- Bake Engine
"""
