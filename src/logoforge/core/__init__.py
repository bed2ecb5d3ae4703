"""
Core modules for logoforge.

This package contains the core business logic for:
- The logo choice catalog and prompt templates
- Prompt composition for generation and edits
- The generation/edit session state machine
- Image providers and reference image handling
"""
