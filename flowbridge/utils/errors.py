"""Custom error classes for Flowbridge."""


class FlowbridgeError(Exception):
    """Base exception for all Flowbridge errors."""

    pass


class NodeNotFoundError(FlowbridgeError):
    """Raised when a node id does not exist in the graph."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node with id '{node_id}' not found")


class UnknownNodeTypeError(FlowbridgeError):
    """Raised when a node type is not present in the catalog or registry."""

    pass


class ConfigurationError(FlowbridgeError):
    """Raised when a node's configuration is missing a required field."""

    def __init__(self, node_type: str, field: str, message: str = None):
        self.node_type = node_type
        self.field = field
        super().__init__(
            message or f"Node type '{node_type}' requires config field '{field}'"
        )


class AdapterError(FlowbridgeError):
    """Raised when a capability adapter's external call fails."""

    pass


class AdapterHandshakeError(AdapterError):
    """Raised when a long-running adapter fails its init/start handshake."""

    def __init__(self, phase: str, message: str):
        self.phase = phase
        super().__init__(f"Handshake failed during '{phase}': {message}")


class NodeExecutionError(FlowbridgeError):
    """Raised when node execution fails."""

    def __init__(self, node_id: str, message: str, original_error: Exception = None):
        self.node_id = node_id
        self.original_error = original_error
        super().__init__(f"Node '{node_id}' execution failed: {message}")


class SnapshotError(FlowbridgeError):
    """Raised when a stored graph snapshot cannot be decoded."""

    pass
