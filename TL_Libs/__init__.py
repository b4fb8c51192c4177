"""
TL_Libs - Translucify Library Modules

This package contains core functionality for the Translucify project,
organized into specialized sub-packages:

- ImageEditingLib: Flood fill engine, buffer conversion and batch operations
- NodesLib: Import, translucify and output nodes
- ProjStoreLib: Executor registry, batch job files and the batch runner
"""

__version__ = "0.1.0"
