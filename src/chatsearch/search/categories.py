"""Document categories partitioned within the shared search index."""

from enum import Enum


class DocumentCategory(Enum):
    """Document kind with its API key and its value in the ``type`` field."""

    MESSAGE = ("message", "msg")
    ROOM = ("room", "room")
    USER = ("user", "user")
    FILE = ("file", "file")

    def __init__(self, key: str, index_value: str) -> None:
        self.key = key
        self.index_value = index_value

    @classmethod
    def from_key(cls, key: str) -> "DocumentCategory":
        """Look up a category by its external key.

        Raises:
            ValueError: If no category uses the key.
        """
        for category in cls:
            if category.key == key:
                return category
        raise ValueError(f"Unknown document category: {key}")
