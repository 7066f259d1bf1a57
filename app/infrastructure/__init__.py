"""Infrastructure modules for the command framework.

Centralized infrastructure components:
- commands: Tokenizer, argument parsing, command tree and routing
"""
