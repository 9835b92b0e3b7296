"""Job pipeline tracking backend."""
