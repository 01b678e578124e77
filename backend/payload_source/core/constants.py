"""Constants shared across the sync engine."""

PLUGIN_NAME = "payload-source"


class CacheKeys:
    """Keys used in the persistent cache store."""

    TIMESTAMP = "timestamp"


class NodeTypes:
    """Node types created by the engine that are not derived from a Payload slug."""

    ASSET = "Asset"
    FILE = "File"


# Default prefix applied to every node type derived from a Payload slug
DEFAULT_NODE_PREFIX = "Payload"

# Delimiter used to join node id fragments (type, id, locale)
NODE_ID_DELIMITER = "-"

# Delimiter used to join a slug and an entity id into an owning document id
DOCUMENT_KEY_DELIMITER = "."
