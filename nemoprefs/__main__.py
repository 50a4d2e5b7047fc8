"""
Nemoprefs - provider settings resolution for Nemo

Resolves which AI model provider a Nemo instance should use from the host
preference store, a key-value fallback store, or a built-in default.

Quick Start:
    pip install -e .
    nemoprefs default
"""

from nemoprefs.cli.cli import main

if __name__ == "__main__":
    main()
