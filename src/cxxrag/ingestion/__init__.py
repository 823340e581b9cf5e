"""
Ingestion — language detection, declaration chunking, and batched
embedding of source files into the vector store.
"""
