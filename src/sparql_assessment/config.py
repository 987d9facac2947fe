"""
Shared configuration: timeouts, limits and well-known constants.
"""

# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------
QUERY_TIMEOUT = 5 * 60          # read timeout (seconds) per query attempt
HTTP_TIMEOUT = 60               # timeout (seconds) per HTTP fetch hop
MAX_REDIRECTS = 10
QUERY_METHODS = ("POST", "GET")

USER_AGENT = "sparql-assessment/0.1.0"

# ---------------------------------------------------------------------------
# Content negotiation / self-description
# ---------------------------------------------------------------------------
VOID_PATH = "/.well-known/void"
RDF_ACCEPT = (
    "text/turtle, application/rdf+xml;q=0.9, application/n-triples;q=0.8, "
    "application/ld+json;q=0.7, text/n3;q=0.6"
)

# ---------------------------------------------------------------------------
# Exclusion filter: names a triple store creates for itself
# ---------------------------------------------------------------------------
ADMIN_HOSTS = frozenset({"www.w3.org", "www.openlinksw.com"})
ADMIN_PATHS = frozenset({"/DAV"})
VIRTUOSO_SYSTEM_GRAPH = "http://www.openlinksw.com/schemas/virtrdf#"

# ---------------------------------------------------------------------------
# Probe sizes
# ---------------------------------------------------------------------------
CLASSES_LIMIT = 100
LINKS_LIMIT = 1000
SUBJECT_OFFSET = 100
HEAVY_QUERY_OFFSETS = (0, 100, 200)
HEAVY_QUERY_LIMIT = 100
