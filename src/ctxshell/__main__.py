"""Entry point for running ctxshell as a module.

This allows running: python -m ctxshell
"""

from .cli import main

if __name__ == "__main__":
    main()
