"""
Services package: section generation pipeline, layered API configuration,
dependency probing and feed retrieval.
"""
