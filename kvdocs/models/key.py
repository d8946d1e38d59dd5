"""
KeyCodec - order-preserving encoding of (collection, id) storage keys.
"""

from dataclasses import dataclass

from kvdocs.models.exceptions import DecodeFailure

# Type code for a UTF-8 string component
STRING_CODE = 0x02

# Component terminator and the escape byte that follows an embedded NUL
TERMINATOR = 0x00
ESCAPE = 0xFF


def _pack_component(value: str) -> bytes:
    """Pack one string component as [code][utf-8 with NUL escaped][0x00]."""
    data = value.encode("utf-8").replace(b"\x00", b"\x00\xff")
    return bytes([STRING_CODE]) + data + bytes([TERMINATOR])


@dataclass(frozen=True)
class KeyPrefix:
    """
    Bounds of the key range owned by a single collection.

    Attributes:
        packed: The packed collection-name component shared by every key
            in the collection.
    """

    packed: bytes

    @property
    def start(self) -> bytes:
        """Inclusive lower bound of the range."""
        return self.packed + b"\x00"

    @property
    def end(self) -> bytes:
        """Exclusive upper bound of the range."""
        return self.packed + b"\xff"

    def contains(self, key: bytes) -> bool:
        return self.start <= key < self.end


class KeyCodec:
    """
    Encodes composite (collection, id) keys into ordered bytes.

    Each component is written as a type byte, its UTF-8 bytes with every
    NUL escaped as 0x00 0xFF, and a NUL terminator. Byte order of encoded
    keys equals lexicographic order of (collection, id), so a collection
    occupies one contiguous range and can be scanned with a single
    [start, end) bound.
    """

    @staticmethod
    def encode(collection: str, doc_id: str) -> bytes:
        return _pack_component(collection) + _pack_component(doc_id)

    @staticmethod
    def prefix(collection: str) -> KeyPrefix:
        return KeyPrefix(_pack_component(collection))

    @staticmethod
    def decode(key: bytes) -> tuple[str, str]:
        """
        Decode a storage key back into its (collection, id) pair.

        Args:
            key: Bytes produced by encode().

        Returns:
            Tuple of (collection, id).

        Raises:
            DecodeFailure: If the bytes are not a two-component string key.
        """
        components: list[str] = []
        offset = 0

        while offset < len(key):
            if key[offset] != STRING_CODE:
                raise DecodeFailure(
                    f"Unexpected type code 0x{key[offset]:02x} at offset {offset}",
                    key=key,
                )
            offset += 1

            buf = bytearray()
            while True:
                if offset >= len(key):
                    raise DecodeFailure("Unterminated key component", key=key)
                byte = key[offset]
                if byte == TERMINATOR:
                    # 0x00 0xFF is an escaped NUL, a bare 0x00 ends the component
                    if offset + 1 < len(key) and key[offset + 1] == ESCAPE:
                        buf.append(TERMINATOR)
                        offset += 2
                        continue
                    offset += 1
                    break
                buf.append(byte)
                offset += 1

            try:
                components.append(buf.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise DecodeFailure(f"Key component is not valid UTF-8: {e}", key=key) from e

        if len(components) != 2:
            raise DecodeFailure(
                f"Expected 2 key components, found {len(components)}", key=key
            )

        return components[0], components[1]
