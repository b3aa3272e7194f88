"""Constants for the content relationship graph.

Content type tags, backend collection names and the limits used by the
suggestion engine, the catalog search and the HTTP record store.
"""

# Reserved relationship endpoint type. Edges touching it mark content that is
# used inside a playable game; they are read for integrity checks only.
PROTECTED_REFERENCE_TYPE = "Game"

# Listed in the console but never implemented by the backend.
UNIMPLEMENTED_CONTENT_TYPES: frozenset[str] = frozenset({"Rules"})

# Backend collection names for the graph records
RELATIONSHIP_COLLECTION = "contentrelationship"
TAG_COLLECTION = "gamecontenttag"
TAG_ASSIGNMENT_COLLECTION = "contenttag"

# Newest first, as the console lists everything
DEFAULT_SORT = "-created_date"

# Audit identity used when the caller does not supply one
DEFAULT_ACTOR = "admin"

# UX bounds for result lists
MAX_SUGGESTIONS = 10
MAX_SEARCH_RESULTS = 20

# HTTP record store
REQUEST_TIMEOUT_SECONDS = 30.0
MAX_RETRIES = 3
