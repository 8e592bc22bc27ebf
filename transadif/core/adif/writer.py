"""
ADIF writer.

Layout:
- preamble (newline terminated) when it is not blank
- header fields, one per line, PROGRAMID and ENCODING first
- header excess when not blank, then <eoh>
- each record: one field per line, record excess when not blank, <eor>

Field lengths count characters for UTF-8 output and bytes otherwise.
The whole document is encoded before anything is returned, so a fatal
encoding error never leaves partial output behind.
"""

from __future__ import annotations

from transadif.core.codec import UTF_8, encode, get_registry
from transadif.core.codec.registry import EncodingCandidate
from transadif.core.config import PipelineConfig
from transadif.core.errors import Location, TransadifError
from transadif.core.models import Document, ResolvedField

_OWNED_HEADER_FIELDS = ("PROGRAMID", "ENCODING")


class _Writer:
    def __init__(self, document: Document, config: PipelineConfig) -> None:
        self.document = document
        self.config = config
        self.target: EncodingCandidate = get_registry().lookup(config.output_encoding)
        self.source = get_registry().lookup(document.encoding)

    def text(self, text: str) -> bytes:
        return encode(text, self.target, self.config.policy, strict=self.config.strict)

    def excess(self, data: bytes) -> bytes:
        text = self.source.decode(data, "replace")
        return self.text(text) if text.strip() else b""

    def field(
        self,
        name: str,
        value: str,
        tag_type: str | None = None,
        excess: bytes = b"",
    ) -> bytes:
        encoded = self.text(value)
        length = len(encoded.decode("utf-8")) if self.target is UTF_8 else len(encoded)
        tag = f"<{name}:{length}:{tag_type}>" if tag_type else f"<{name}:{length}>"
        return tag.encode("ascii") + encoded + self.excess(excess)

    def header_fields(self) -> list[bytes]:
        fields = self.document.header_fields
        if not fields:
            return []
        lines = [
            self.field("PROGRAMID", self.config.program_id),
            self.field("ENCODING", self.target.identifier),
        ]
        lines.extend(
            self.record_field(f) for f in fields if f.name.upper() not in _OWNED_HEADER_FIELDS
        )
        return lines

    def record_field(self, field: ResolvedField) -> bytes:
        return self.field(field.name, field.text, field.tag_type, field.excess_bytes)

    def write(self) -> bytes:
        out = bytearray()
        document = self.document

        if document.preamble.strip():
            out += self.text(document.preamble)
            if not document.preamble.endswith("\n"):
                out += b"\n"

        for line in self.header_fields():
            out += line + b"\n"
        out += self.excess(document.header_excess)
        out += b"<eoh>"

        for record in document.records:
            for index, field in enumerate(record.fields, start=1):
                try:
                    out += b"\n" + self.record_field(field)
                except TransadifError as exc:
                    location = Location(
                        record=record.index,
                        field_index=index,
                        field=field.name,
                        offset=field.offset,
                    )
                    raise exc.at(location) from exc
            out += self.excess(record.excess_bytes)
            out += b"\n<eor>\n"

        return bytes(out)


def write_document(document: Document, config: PipelineConfig | None = None) -> bytes:
    """
    Serialize a document in the configured output encoding.

    Raises:
        UnknownEncodingError: If the output encoding is not supported
        UnencodableCharacterError: If a character cannot be written under the policy
    """
    return _Writer(document, config or PipelineConfig()).write()
