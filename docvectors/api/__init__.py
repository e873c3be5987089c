"""HTTP API for the vector store."""
