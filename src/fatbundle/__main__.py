"""Allow ``python -m fatbundle``."""

from fatbundle.cli import main

main()
