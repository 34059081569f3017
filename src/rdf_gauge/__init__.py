"""
rdf-gauge

Measures how reliably a language model produces valid RDF Turtle for ontology
entities, and how often it references terms that do not exist.
"""

__version__ = "0.1.0"
