"""ticket-rag — retrieval-augmented answers over support tickets."""

__version__ = "0.1.0"
