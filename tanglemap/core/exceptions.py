# tanglemap/core/exceptions.py
class NodeNotFoundException(Exception):
    """Raised when a tangle id is not present in the current map."""
    def __init__(self, message="Node not found."):
        self.message = message
        super().__init__(self.message)

