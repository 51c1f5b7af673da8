"""Command line interface (``python -m sheetmap.cli`` or the ``sheetmap`` script)."""
