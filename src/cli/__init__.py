"""Command-line tools for cratedigger.

- ``python -m src.cli`` / ``python -m src.cli.dig`` -- seed the starter
  catalog, run one sweep, print collection stats, or start the worker.

Heavy imports (chromadb, openai) are deferred into the command handlers so
``--help`` stays fast.
"""
