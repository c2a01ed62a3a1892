"""In-memory WebAssembly module graph.

Only the parts of the binary needed to find functions by name and to set
the start function are decoded: types, imports, the function index space,
exports, the start section and the ``name`` custom section. Every other
section is kept as an opaque payload and written back unchanged, so
:meth:`Module.to_bytes` is deterministic for a given graph.

Functions live in a flat arena (``Module.functions``) ordered by function
index: imported functions first, then defined ones. The start function is
a single optional index into that arena.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import structlog

from gofumpt_build.errors import WasmDecodeError
from gofumpt_build.wasm.leb128 import decode_signed, decode_unsigned, encode_unsigned

logger = structlog.get_logger(__name__)

MAGIC = b"\x00asm"
VERSION = b"\x01\x00\x00\x00"

FUNC_TYPE_FORM = 0x60


class SectionId(IntEnum):
    """WebAssembly section identifiers."""

    CUSTOM = 0
    TYPE = 1
    IMPORT = 2
    FUNCTION = 3
    TABLE = 4
    MEMORY = 5
    GLOBAL = 6
    EXPORT = 7
    START = 8
    ELEMENT = 9
    CODE = 10
    DATA = 11
    DATA_COUNT = 12
    TAG = 13


class ExternalKind(IntEnum):
    """Kinds of import and export descriptors."""

    FUNCTION = 0
    TABLE = 1
    MEMORY = 2
    GLOBAL = 3
    TAG = 4


# Required order of non-custom sections. Ids are not monotonic: tag and
# data count sit between older sections.
SECTION_ORDER: dict[int, int] = {
    section_id: position
    for position, section_id in enumerate(
        [
            SectionId.TYPE,
            SectionId.IMPORT,
            SectionId.FUNCTION,
            SectionId.TABLE,
            SectionId.MEMORY,
            SectionId.TAG,
            SectionId.GLOBAL,
            SectionId.EXPORT,
            SectionId.START,
            SectionId.ELEMENT,
            SectionId.DATA_COUNT,
            SectionId.CODE,
            SectionId.DATA,
        ]
    )
}

_NAME_SUBSECTION_FUNCTIONS = 1
_REF_TYPE_PREFIXES = (0x63, 0x64)
_DECODED_SECTIONS = frozenset(
    {SectionId.TYPE, SectionId.IMPORT, SectionId.FUNCTION, SectionId.EXPORT, SectionId.START}
)


@dataclass(frozen=True)
class Section:
    """A raw section: id plus undecoded payload."""

    id: int
    payload: bytes

    def encode(self) -> bytes:
        return bytes([self.id]) + encode_unsigned(len(self.payload)) + self.payload


@dataclass(frozen=True)
class FunctionType:
    """A function signature. Value types are kept as raw encodings."""

    params: tuple[bytes, ...]
    results: tuple[bytes, ...]

    @property
    def is_nullary(self) -> bool:
        """True for ``[] -> []``."""
        return not self.params and not self.results


@dataclass
class Function:
    """A node in the function arena.

    Attributes:
        index: Position in the function index space.
        type_index: Index into ``Module.types``.
        imported: True if the function comes from the import section.
        export_names: Names this function is exported under.
        debug_name: Name from the ``name`` custom section, if present.
    """

    index: int
    type_index: int
    imported: bool = False
    export_names: list[str] = field(default_factory=list)
    debug_name: str | None = None

    @property
    def name(self) -> str | None:
        """Preferred display name: first export name, then debug name."""
        if self.export_names:
            return self.export_names[0]
        return self.debug_name


class _Reader:
    def __init__(self, data: bytes, base: int = 0) -> None:
        self.data = data
        self.pos = 0
        self.base = base

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def fail(self, message: str) -> WasmDecodeError:
        return WasmDecodeError(message, offset=self.base + self.pos)

    def byte(self) -> int:
        if self.at_end:
            raise self.fail("Unexpected end of data")
        value = self.data[self.pos]
        self.pos += 1
        return value

    def raw(self, size: int) -> bytes:
        if self.pos + size > len(self.data):
            raise self.fail(f"Expected {size} bytes")
        chunk = self.data[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def u32(self) -> int:
        try:
            value, self.pos = decode_unsigned(self.data, self.pos)
        except WasmDecodeError:
            raise self.fail("Truncated integer") from None
        return value

    def s33(self) -> int:
        try:
            value, self.pos = decode_signed(self.data, self.pos)
        except WasmDecodeError:
            raise self.fail("Truncated integer") from None
        return value

    def name(self) -> str:
        raw = self.raw(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise self.fail("Name is not valid UTF-8") from None

    def value_type(self) -> bytes:
        start = self.pos
        if self.byte() in _REF_TYPE_PREFIXES:
            self.s33()
        return self.data[start : self.pos]

    def limits(self) -> None:
        flags = self.byte()
        self.u32()
        if flags & 0x01:
            self.u32()


class Module:
    """A parsed WebAssembly module.

    Example:
        >>> module = Module.parse(Path("plugin.wasm").read_bytes())
        >>> init = module.function_named("_initialize")
        >>> module.set_start(init)
        >>> patched = module.to_bytes()
    """

    def __init__(self) -> None:
        self.sections: list[Section] = []
        self.types: list[FunctionType] = []
        self.functions: list[Function] = []
        self.start: int | None = None

    @classmethod
    def parse(cls, data: bytes) -> Module:
        """Decode a WebAssembly binary.

        Raises:
            WasmDecodeError: If the binary is malformed, has sections out of
                order, or uses a type form other than plain function types.
        """
        if len(data) < 8 or data[:4] != MAGIC:
            raise WasmDecodeError("Not a WebAssembly module (bad magic number)", offset=0)
        if data[4:8] != VERSION:
            raise WasmDecodeError(f"Unsupported WebAssembly version {data[4:8].hex()}", offset=4)

        module = cls()
        reader = _Reader(data)
        reader.pos = 8
        last_position = -1
        name_sections: list[_Reader] = []

        while not reader.at_end:
            section_id = reader.byte()
            size = reader.u32()
            offset = reader.pos
            payload = reader.raw(size)

            if section_id != SectionId.CUSTOM:
                position = SECTION_ORDER.get(section_id)
                if position is None:
                    raise WasmDecodeError(f"Unknown section id {section_id}", offset=offset)
                if position <= last_position:
                    raise WasmDecodeError(
                        f"Section {SectionId(section_id).name} out of order", offset=offset
                    )
                last_position = position

            section = Section(section_id, payload)
            if section_id == SectionId.CUSTOM:
                custom = _Reader(payload, base=offset)
                if custom.name() == "name":
                    name_sections.append(custom)
            else:
                module._decode_section(section, offset)
            if section_id != SectionId.START:
                module.sections.append(section)

        # Names may precede the sections that define the function index space.
        for custom in name_sections:
            module._decode_names(custom)

        logger.debug(
            "module_parsed",
            sections=len(module.sections),
            functions=len(module.functions),
            start=module.start,
        )
        return module

    def _decode_section(self, section: Section, offset: int) -> None:
        reader = _Reader(section.payload, base=offset)

        if section.id == SectionId.TYPE:
            for _ in range(reader.u32()):
                form = reader.byte()
                if form != FUNC_TYPE_FORM:
                    raise reader.fail(f"Unsupported type form 0x{form:02x}")
                params = tuple(reader.value_type() for _ in range(reader.u32()))
                results = tuple(reader.value_type() for _ in range(reader.u32()))
                self.types.append(FunctionType(params, results))

        elif section.id == SectionId.IMPORT:
            for _ in range(reader.u32()):
                reader.name()
                reader.name()
                kind = reader.byte()
                if kind == ExternalKind.FUNCTION:
                    self.functions.append(
                        Function(index=len(self.functions), type_index=reader.u32(), imported=True)
                    )
                elif kind == ExternalKind.TABLE:
                    reader.value_type()
                    reader.limits()
                elif kind == ExternalKind.MEMORY:
                    reader.limits()
                elif kind == ExternalKind.GLOBAL:
                    reader.value_type()
                    reader.byte()
                elif kind == ExternalKind.TAG:
                    reader.byte()
                    reader.u32()
                else:
                    raise reader.fail(f"Unknown import kind {kind}")

        elif section.id == SectionId.FUNCTION:
            for _ in range(reader.u32()):
                self.functions.append(Function(index=len(self.functions), type_index=reader.u32()))

        elif section.id == SectionId.EXPORT:
            for _ in range(reader.u32()):
                name = reader.name()
                kind = reader.byte()
                index = reader.u32()
                if kind == ExternalKind.FUNCTION:
                    self._function_at(index, reader).export_names.append(name)

        elif section.id == SectionId.START:
            self.start = self._function_at(reader.u32(), reader).index

        if section.id in _DECODED_SECTIONS and not reader.at_end:
            raise reader.fail(f"Unexpected trailing bytes in {SectionId(section.id).name} section")

    def _decode_names(self, reader: _Reader) -> None:
        # A malformed name section does not invalidate a module.
        try:
            while not reader.at_end:
                subsection = reader.byte()
                size = reader.u32()
                base = reader.base + reader.pos
                body = _Reader(reader.raw(size), base=base)
                if subsection != _NAME_SUBSECTION_FUNCTIONS:
                    continue
                for _ in range(body.u32()):
                    index = body.u32()
                    name = body.name()
                    if index < len(self.functions):
                        self.functions[index].debug_name = name
        except WasmDecodeError as e:
            logger.warning("name_section_ignored", error=str(e))

    def _function_at(self, index: int, reader: _Reader) -> Function:
        if index >= len(self.functions):
            raise reader.fail(f"Function index {index} out of range")
        return self.functions[index]

    def function_named(self, name: str) -> Function | None:
        """Find a function by export name, falling back to its debug name."""
        for function in self.functions:
            if name in function.export_names:
                return function
        for function in self.functions:
            if function.debug_name == name:
                return function
        return None

    def signature(self, function: Function) -> FunctionType:
        """Return the type of ``function``."""
        if function.type_index >= len(self.types):
            raise WasmDecodeError(
                f"Function {function.index} has type index {function.type_index} out of range"
            )
        return self.types[function.type_index]

    def set_start(self, function: Function) -> None:
        """Make ``function`` the module's start function."""
        if self.functions[function.index] is not function:
            raise ValueError(f"Function {function.index} does not belong to this module")
        self.start = function.index

    def _ordered_sections(self) -> list[Section]:
        if self.start is None:
            return list(self.sections)

        start_section = Section(SectionId.START, encode_unsigned(self.start))
        start_position = SECTION_ORDER[SectionId.START]
        for i, section in enumerate(self.sections):
            if section.id != SectionId.CUSTOM and SECTION_ORDER[section.id] > start_position:
                return [*self.sections[:i], start_section, *self.sections[i:]]
        return [*self.sections, start_section]

    def to_bytes(self) -> bytes:
        """Serialize the module, emitting the start section in its required position."""
        out = bytearray(MAGIC + VERSION)
        for section in self._ordered_sections():
            out += section.encode()
        return bytes(out)
