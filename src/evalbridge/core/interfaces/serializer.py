"""Serializer interface."""

from typing import Any, Protocol


class ISerializer(Protocol):
    """Contract for encoding evaluated values into response payloads.

    Serializers handle the conversion between Python objects
    and bytes written to the producer.
    """

    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: The Python object to serialize.

        Returns:
            The serialized value as bytes.

        Raises:
            SerializationError: If the value cannot be serialized.
        """
        ...

    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: The bytes to deserialize.

        Returns:
            The deserialized Python object.

        Raises:
            SerializationError: If the data cannot be deserialized.
        """
        ...
