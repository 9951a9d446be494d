"""FlowGen: node-based app builder backend."""

__version__ = "0.2.0"
