"""
SpecTrace Parser Data Models.

Defines the data structures produced by every parser: the WebIDL
declaration tree, per-artifact symbol tables and narrative algorithms.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Source locations
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class SymbolLocation:
    """1-indexed source position of a symbol, optionally with its last line."""

    line: int
    end_line: int | None = None

    @property
    def as_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        data = {"line": self.line}
        if self.end_line is not None:
            data["endLine"] = self.end_line
        return data


SymbolTable = dict[str, SymbolLocation]


@dataclass(slots=True)
class CppHeaderSymbols:
    """Declarations found in a low-level header."""

    class_name: str = ""
    methods: SymbolTable = field(default_factory=dict)
    static_methods: SymbolTable = field(default_factory=dict)


@dataclass(slots=True)
class CppImplSymbols:
    """Definitions found in a low-level implementation file."""

    ctor: SymbolLocation | None = None
    methods: SymbolTable = field(default_factory=dict)


@dataclass(slots=True)
class TsClassSymbols:
    """Members of the first class declared in a wrapper file."""

    class_name: str = ""
    constructor: SymbolLocation | None = None
    methods: SymbolTable = field(default_factory=dict)
    getters: SymbolTable = field(default_factory=dict)
    setters: SymbolTable = field(default_factory=dict)
    static_methods: SymbolTable = field(default_factory=dict)


@dataclass(slots=True)
class TestCase:
    """A single case-function call in a test file."""

    __test__ = False  # keep pytest from collecting this class

    name: str
    location: SymbolLocation


@dataclass(slots=True)
class TsTestSymbols:
    """Named groups and ordered cases found in a test file."""

    describes: SymbolTable = field(default_factory=dict)
    cases: list[TestCase] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Narrative documents
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class AlgorithmEntry:
    """Algorithm section for one method in a narrative document."""

    signature: str
    is_static: bool = False
    steps: list[str] = field(default_factory=list)


@dataclass(slots=True)
class SpecAttribute:
    """One bullet of a narrative document's attribute listing."""

    name: str
    type: str
    readonly: bool = False


@dataclass(slots=True)
class SpecDocument:
    """Everything extracted from a narrative document."""

    methods: dict[str, AlgorithmEntry] = field(default_factory=dict)
    attributes: list[SpecAttribute] = field(default_factory=list)

    def attribute(self, name: str) -> SpecAttribute | None:
        """Find an attribute in the listing by name."""
        return next((a for a in self.attributes if a.name == name), None)


# ---------------------------------------------------------------------------
# WebIDL declarations
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class IdlLocation:
    """Line span of a declaration within the IDL text."""

    line: int
    end_line: int

    @property
    def fragment(self) -> str:
        """Render as a `#L<start>-L<end>` link fragment."""
        return f"#L{self.line}-L{self.end_line}"


@dataclass(slots=True)
class IdlArgument:
    """Operation, constructor or callback argument."""

    name: str
    type: str
    optional: bool = False
    variadic: bool = False
    default: str | None = None
    ext_attrs: list[str] = field(default_factory=list)

    @property
    def signature(self) -> str:
        """Render as `name: type`."""
        suffix = "..." if self.variadic else ""
        return f"{self.name}: {self.type}{suffix}"


@dataclass(slots=True)
class IdlAttribute:
    """`attribute` member."""

    name: str
    type: str
    readonly: bool = False
    is_static: bool = False
    inherit: bool = False
    ext_attrs: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IdlOperation:
    """Regular, static or special operation member."""

    name: str
    return_type: str
    parameters: list[IdlArgument] = field(default_factory=list)
    is_static: bool = False
    special: str | None = None  # getter, setter, deleter, stringifier
    ext_attrs: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IdlConstructor:
    """`constructor(...)` member."""

    parameters: list[IdlArgument] = field(default_factory=list)
    ext_attrs: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return "constructor"


@dataclass(slots=True)
class IdlConst:
    """`const` member."""

    name: str
    type: str
    value: str
    ext_attrs: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IdlIterable:
    """`iterable`, `async iterable`, `maplike` or `setlike` declaration."""

    declaration: str  # iterable, async iterable, maplike, setlike
    types: list[str] = field(default_factory=list)
    readonly: bool = False
    ext_attrs: list[str] = field(default_factory=list)


InterfaceMember = IdlAttribute | IdlOperation | IdlConstructor
IdlMember = IdlAttribute | IdlOperation | IdlConstructor | IdlConst | IdlIterable


@dataclass(slots=True)
class IdlInterface:
    """`interface`, `interface mixin`, `callback interface` or `namespace`."""

    name: str
    inheritance: str | None = None
    members: list[IdlMember] = field(default_factory=list)
    partial: bool = False
    mixin: bool = False
    callback: bool = False
    namespace: bool = False
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None

    @property
    def is_primary(self) -> bool:
        """True for a complete, non-mixin, non-callback interface."""
        return not (self.partial or self.mixin or self.callback or self.namespace)


@dataclass(slots=True)
class IdlDictionaryMember:
    """Dictionary field."""

    name: str
    type: str
    required: bool = False
    default: str | None = None
    ext_attrs: list[str] = field(default_factory=list)


@dataclass(slots=True)
class IdlDictionary:
    """`dictionary` declaration."""

    name: str
    inheritance: str | None = None
    members: list[IdlDictionaryMember] = field(default_factory=list)
    partial: bool = False
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None


@dataclass(slots=True)
class IdlEnum:
    """`enum` declaration."""

    name: str
    values: list[str] = field(default_factory=list)
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None


@dataclass(slots=True)
class IdlCallback:
    """`callback` function declaration."""

    name: str
    return_type: str
    parameters: list[IdlArgument] = field(default_factory=list)
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None


@dataclass(slots=True)
class IdlTypedef:
    """`typedef` declaration."""

    name: str
    type: str
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None


@dataclass(slots=True)
class IdlIncludes:
    """`Target includes Mixin;` statement."""

    target: str
    mixin: str
    ext_attrs: list[str] = field(default_factory=list)
    location: IdlLocation | None = None


IdlDefinition = IdlInterface | IdlDictionary | IdlEnum | IdlCallback | IdlTypedef | IdlIncludes


@dataclass(slots=True)
class IdlDocument:
    """Top-level WebIDL declarations in file order."""

    definitions: list[IdlDefinition] = field(default_factory=list)

    @property
    def interfaces(self) -> list[IdlInterface]:
        """Complete interfaces, excluding partials, mixins and callbacks."""
        return [d for d in self.definitions if isinstance(d, IdlInterface) and d.is_primary]

    @property
    def dictionaries(self) -> list[IdlDictionary]:
        """Non-partial dictionaries."""
        return [d for d in self.definitions if isinstance(d, IdlDictionary) and not d.partial]

    @property
    def enums(self) -> list[IdlEnum]:
        return [d for d in self.definitions if isinstance(d, IdlEnum)]

    def interface_members(self, name: str) -> list[IdlMember]:
        """
        Collect every member contributed to an interface.

        Order is the interface's own members, then members of partial
        interfaces with the same name, then members of mixins it includes,
        each group in file order.
        """
        own: list[IdlMember] = []
        partials: list[IdlMember] = []
        for definition in self.definitions:
            if isinstance(definition, IdlInterface) and definition.name == name:
                if definition.mixin or definition.callback or definition.namespace:
                    continue
                (partials if definition.partial else own).extend(definition.members)

        mixed_in: list[IdlMember] = []
        for definition in self.definitions:
            if isinstance(definition, IdlIncludes) and definition.target == name:
                for mixin in self.definitions:
                    if isinstance(mixin, IdlInterface) and mixin.mixin and mixin.name == definition.mixin:
                        mixed_in.extend(mixin.members)

        return own + partials + mixed_in

    def dictionary_fields(self, name: str) -> list[IdlDictionaryMember]:
        """Own fields of a dictionary followed by fields of its partials."""
        own: list[IdlDictionaryMember] = []
        partials: list[IdlDictionaryMember] = []
        for definition in self.definitions:
            if isinstance(definition, IdlDictionary) and definition.name == name:
                (partials if definition.partial else own).extend(definition.members)
        return own + partials
