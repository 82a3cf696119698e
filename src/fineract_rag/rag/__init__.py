"""
Retrieval-augmented query pipeline: indexing, similarity search, intent
routing, context assembly and answer generation.
"""
