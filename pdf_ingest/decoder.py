"""Data URI decoding."""

import base64
import binascii
from dataclasses import dataclass

from pdf_ingest.exceptions import MalformedInputError
from pdf_ingest.logger import Timer, get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class EncodedFile:
    mime_type: str
    base64_payload: str


def parse_data_uri(data_uri: str) -> EncodedFile:
    """Split ``data:<mime>;base64,<payload>`` into its parts.

    Raises:
        MalformedInputError: If there is no comma-delimited payload section.
    """
    if not isinstance(data_uri, str):
        raise MalformedInputError(f"Expected a data URI string, got {type(data_uri).__name__}")

    header, sep, payload = data_uri.partition(",")
    if not sep:
        raise MalformedInputError("Data URI has no comma-delimited payload section")

    if header.startswith("data:"):
        header = header[len("data:"):]
    mime_type = header.split(";", 1)[0].strip().lower() or DEFAULT_MIME_TYPE

    return EncodedFile(mime_type=mime_type, base64_payload=payload.strip())


def decode_payload(encoded: EncodedFile) -> bytes:
    """Decode the base64 payload of an ``EncodedFile``.

    Raises:
        MalformedInputError: If the payload is not valid base64 or is empty.
    """
    try:
        with Timer("base64_decode") as timer:
            decoded = base64.b64decode(encoded.base64_payload, validate=True)
    except (ValueError, binascii.Error) as exc:
        logger.error(
            "Failed to decode base64 payload",
            extra_data={
                "error_type": type(exc).__name__,
                "encoded_length": len(encoded.base64_payload),
            },
        )
        raise MalformedInputError("Payload is not valid base64") from exc

    if not decoded:
        raise MalformedInputError("Payload decodes to an empty byte sequence")

    logger.debug(
        "Decoded data URI payload",
        extra_data={
            "mime_type": encoded.mime_type,
            "decoded_size_bytes": len(decoded),
            "decode_time_ms": timer.get_elapsed_ms(),
        },
    )
    return decoded


def decode_data_uri(data_uri: str) -> bytes:
    """Decode a data URI into raw bytes."""
    return decode_payload(parse_data_uri(data_uri))
