"""RPA workflow engine: catalog, registry, run history and execution."""
