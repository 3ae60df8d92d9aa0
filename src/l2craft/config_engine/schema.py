"""Schema definitions for the Config Engine.

Defines the parse tree, the base-config model, change directives, the
change plan and the results handed back to hosts.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# --- Parse Tree ---

@dataclass(frozen=True)
class Statement:
    """A single configuration line."""
    text: str
    line: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"type": "stmt", "stmt": self.text}


@dataclass(frozen=True)
class Block:
    """A configuration line followed by more deeply indented lines."""
    name: str
    children: tuple["Node", ...] = ()
    line: int = 0

    def statements(self) -> list[Statement]:
        """Direct child statements, in order."""
        return [c for c in self.children if isinstance(c, Statement)]

    def blocks(self) -> list["Block"]:
        """Direct child blocks, in order."""
        return [c for c in self.children if isinstance(c, Block)]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "block",
            "name": self.name,
            "stmts": [c.to_dict() for c in self.children],
        }


Node = Union[Block, Statement]


# --- Base Config Model ---

@dataclass(frozen=True)
class BaseInterface:
    """A plain (non sub-) interface from the base config."""
    name: str
    line: int = 0
    description: Optional[str] = None
    statements: tuple[str, ...] = ()  # every line, in source order
    bundle_id: Optional[int] = None

    @property
    def is_bvi(self) -> bool:
        return self.name.startswith("BVI")

    @property
    def passthrough(self) -> tuple[str, ...]:
        """Opaque lines (everything except the description)."""
        return tuple(s for s in self.statements if not s.startswith("description "))

    @property
    def bundle_name(self) -> Optional[str]:
        if self.bundle_id is None:
            return None
        return f"Bundle-Ether{self.bundle_id}"


@dataclass(frozen=True)
class SubInterface:
    """An l2transport sub-interface ``{base}.{vlan_tag}``."""
    base: str
    vlan_tag: int
    line: int = 0
    encapsulation: Optional[int] = None
    description: Optional[str] = None
    has_rewrite: bool = False

    @property
    def name(self) -> str:
        return f"{self.base}.{self.vlan_tag}"


@dataclass(frozen=True)
class BridgeDomain:
    """An L2VPN bridge-domain ``VLAN{vlan_tag}``."""
    vlan_tag: int
    line: int = 0
    description: Optional[str] = None
    members: tuple[str, ...] = ()  # sub-interface names
    routed: tuple[str, ...] = ()   # BVI names

    @property
    def name(self) -> str:
        return f"VLAN{self.vlan_tag}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "vlan_tag": self.vlan_tag,
            "description": self.description,
            "interfaces": list(self.members),
            "routed_interfaces": list(self.routed),
        }


@dataclass
class BaseConfigModel:
    """Structured view of a base configuration.

    Built once per base-document parse and never mutated afterwards.
    """
    interfaces: dict[str, BaseInterface] = field(default_factory=dict)
    subinterfaces: dict[str, list[SubInterface]] = field(default_factory=dict)
    bridge_domains: list[BridgeDomain] = field(default_factory=list)

    def interface(self, name: str) -> Optional[BaseInterface]:
        return self.interfaces.get(name)

    def domain(self, vlan_tag: int) -> Optional[BridgeDomain]:
        for domain in self.bridge_domains:
            if domain.vlan_tag == vlan_tag:
                return domain
        return None

    def domains_with_member(self, member: str) -> list[BridgeDomain]:
        return [d for d in self.bridge_domains if member in d.members]

    def current_vlans(self, name: str) -> set[int]:
        """VLAN tags of the sub-interfaces already present on ``name``.

        Counts both l2transport blocks and bridge-domain members named
        ``{name}.{tag}``.
        """
        vlans = {s.vlan_tag for s in self.subinterfaces.get(name, [])}
        prefix = f"{name}."
        for domain in self.bridge_domains:
            for member in domain.members:
                suffix = member[len(prefix):] if member.startswith(prefix) else ""
                if suffix.isdigit():
                    vlans.add(int(suffix))
        return vlans


# --- Change Directives ---

class VlanAction(str, Enum):
    """Trunk VLAN operation from the change input."""
    ADD = "add"
    REMOVE = "remove"
    CLEAR = "none"


@dataclass(frozen=True)
class VlanOperation:
    """One ``switchport trunk allowed vlan ...`` statement, expanded."""
    action: VlanAction
    vlans: tuple[int, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class VlanDatabaseEntry:
    """A ``vlan {id} name {name}`` declaration."""
    vlan_id: int
    name: str
    line: int = 0


@dataclass
class InterfaceDirective:
    """Everything the change input asks for on one interface."""
    name: str
    line: int = 0
    description: Optional[str] = None
    passthrough: list[str] = field(default_factory=list)  # includes description lines
    trunk_mode: bool = False
    operations: list[VlanOperation] = field(default_factory=list)

    @property
    def is_bvi(self) -> bool:
        return self.name.startswith("BVI")

    @property
    def has_vlan_operations(self) -> bool:
        return bool(self.operations)

    def desired_vlans(self, current: set[int]) -> set[int]:
        """Fold the VLAN operations over ``current`` in document order."""
        desired = set(current)
        for op in self.operations:
            if op.action == VlanAction.CLEAR:
                desired = set()
            elif op.action == VlanAction.ADD:
                desired |= set(op.vlans)
            else:
                desired -= set(op.vlans)
        return desired


@dataclass
class ChangeDirectiveSet:
    """Validated change input: VLAN database plus per-interface directives.

    ``directives`` keeps the order in which interfaces were first referenced.
    """
    vlan_database: dict[int, VlanDatabaseEntry] = field(default_factory=dict)
    directives: dict[str, InterfaceDirective] = field(default_factory=dict)

    def vlan_name(self, vlan_id: int) -> Optional[str]:
        entry = self.vlan_database.get(vlan_id)
        return entry.name if entry else None


# --- Change Plan ---

@dataclass
class InterfaceUpdate:
    """Lines to apply directly under ``interface {name}``."""
    name: str
    lines: list[str] = field(default_factory=list)


@dataclass
class SubInterfaceCreation:
    """A new l2transport sub-interface."""
    base: str
    vlan: int
    description: str

    @property
    def name(self) -> str:
        return f"{self.base}.{self.vlan}"


@dataclass
class BridgeDomainChange:
    """Membership changes for one bridge-domain."""
    vlan_tag: int
    description: Optional[str] = None
    created: bool = False
    removals: list[str] = field(default_factory=list)
    additions: list[str] = field(default_factory=list)
    routed_additions: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.removals or self.additions or self.routed_additions)


@dataclass
class ChangePlan:
    """Ordered set of changes needed to reach the desired state."""
    interface_updates: list[InterfaceUpdate] = field(default_factory=list)
    removals: list[str] = field(default_factory=list)  # sub-interface names
    additions: list[SubInterfaceCreation] = field(default_factory=list)
    domain_changes: dict[int, BridgeDomainChange] = field(default_factory=dict)

    @property
    def no_change(self) -> bool:
        """Check if there are any changes."""
        return self.total_changes == 0

    @property
    def total_changes(self) -> int:
        """Total number of changes."""
        return (
            len(self.interface_updates) +
            len(self.removals) +
            len(self.additions) +
            len(self.domain_changes)
        )


# --- Results ---

@dataclass
class LintFinding:
    """An advisory structural problem in the base config."""
    subject: str  # e.g. "interface Gi0/0/0/1.300 l2transport"
    message: str
    line: int = 0

    def to_dict(self) -> dict:
        return {"subject": self.subject, "message": self.message, "line": self.line}


@dataclass
class RenderResult:
    """Output of the simplification/lint renderer."""
    simplified_config: str = ""
    findings: list[LintFinding] = field(default_factory=list)
    lint_output: str = ""


@dataclass
class AnalysisResult:
    """Result of analyzing a base config."""
    domains: list[BridgeDomain] = field(default_factory=list)
    lint_output: str = ""
    simplified_config: str = ""
    findings: list[LintFinding] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "domains": [d.to_dict() for d in self.domains],
            "lint_output": self.lint_output,
            "simplified_config": self.simplified_config,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass
class ChangeResult:
    """Result of generating change commands."""
    success: bool = False
    change_output: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None
    error_line: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "change_output": self.change_output,
            "error": self.error,
            "error_kind": self.error_kind,
            "error_line": self.error_line,
        }
