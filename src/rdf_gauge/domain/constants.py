"""
Domain Constants

Centrally manages constants shared across the evaluation harness.
"""

from rdf_gauge.domain.value_objects import ValidationContext

# Default model list
DEFAULT_MODELS = [
    "gpt-3.5-turbo",
    "gpt-4",
    # "claude-haiku-4-5-20251001",
    # "gemini-2.5-flash",
]

# Retry loop (content validation failures)
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY_MS = 250

# Evaluation runner (transient backend failures)
DEFAULT_OUTER_RETRIES = 3
DEFAULT_OUTER_DELAY_SECONDS = 2.5
DEFAULT_JITTER_SECONDS = 1.0
DEFAULT_MAX_WORKERS = 8

# Status codes treated as temporary unavailability
TRANSIENT_STATUS_CODES = frozenset({503})

# Reference namespace of the evaluated ontology
D3FEND_URI = "http://d3fend.mitre.org/ontologies/d3fend.owl#"
D3FEND_PREFIX = "d3f"

D3FEND_NAMESPACES = {
    "d3f": D3FEND_URI,
    "dcterms": "http://purl.org/dc/terms/",
    "owl": "http://www.w3.org/2002/07/owl#",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "skos": "http://www.w3.org/2004/02/skos/core#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
}

# Column order of the exported report
REPORT_COLUMNS = [
    "qname",
    "retries_remaining",
    "model",
    "num_triples",
    "num_predicates",
    "num_known_predicates",
    "test",
]

D3FEND_CONTEXT = ValidationContext(uri=D3FEND_URI, prefix=D3FEND_PREFIX, namespaces=D3FEND_NAMESPACES)
