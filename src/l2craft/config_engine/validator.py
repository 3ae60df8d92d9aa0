"""Change-input interpretation and validation.

Walks the parse tree of a change document, classifies every statement per
target interface and checks it against the base model and the document's
own VLAN database. The first problem in document order is raised as a
ValidationError; nothing is accumulated.
"""
import logging
import re
from typing import Iterable, Optional

from .errors import ErrorKind, ValidationError
from .schema import (
    BaseConfigModel,
    Block,
    ChangeDirectiveSet,
    InterfaceDirective,
    Node,
    Statement,
    VlanAction,
    VlanDatabaseEntry,
    VlanOperation,
)

logger = logging.getLogger(__name__)

VLAN_DATABASE_BLOCK = "vlan database"

VLAN_ENTRY_PATTERN = re.compile(r"^vlan\s+(\d+)(?:\s+name(?:\s+(.*))?)?$")
DESCRIPTION_PATTERN = re.compile(r"^description\s+(.+)$")
TRUNK_MODE_PATTERN = re.compile(r"^switchport mode\s+trunk$")
ANY_MODE_PATTERN = re.compile(r"^switchport mode\s+(.+)$")
ACCESS_VLAN_PATTERN = re.compile(r"^switchport access vlan\b")
TRUNK_NONE_PATTERN = re.compile(r"^switchport trunk allowed vlan none$")
TRUNK_OP_PATTERN = re.compile(r"^switchport trunk allowed vlan (add|remove)(?:\s+(.*))?$")
BVI_PATTERN = re.compile(r"^BVI(.*)$")

MIN_VLAN = 1
MAX_VLAN = 4094


def parse_vlan_list(tokens: str) -> list[int]:
    """
    Expand a whitespace-separated VLAN list.

    Tokens are bare ids (``300``) or closed ranges (``302-305``). Ids must
    lie within MIN_VLAN..MAX_VLAN.

    Args:
        tokens: The list text after ``add``/``remove``

    Returns:
        Expanded VLAN ids in input order

    Raises:
        ValidationError: VlanListEmpty, InvalidVlanNumber or InvalidVlanRange
    """
    vlans: list[int] = []
    parts = tokens.split()
    if not parts:
        raise ValidationError(ErrorKind.VLAN_LIST_EMPTY)

    for token in parts:
        if "-" in token:
            bounds = token.split("-")
            if len(bounds) != 2 or not all(b.isdecimal() for b in bounds):
                raise ValidationError(ErrorKind.INVALID_VLAN_NUMBER, detail=token)
            start, end = int(bounds[0]), int(bounds[1])
            if not (MIN_VLAN <= start <= MAX_VLAN and MIN_VLAN <= end <= MAX_VLAN):
                raise ValidationError(ErrorKind.INVALID_VLAN_NUMBER, detail=token)
            if start > end:
                raise ValidationError(ErrorKind.INVALID_VLAN_RANGE, detail=token)
            vlans.extend(range(start, end + 1))
        elif token.isdecimal() and MIN_VLAN <= int(token) <= MAX_VLAN:
            vlans.append(int(token))
        else:
            raise ValidationError(ErrorKind.INVALID_VLAN_NUMBER, detail=token)

    return vlans


def check_interface_name(name: str, line: int) -> None:
    """Reject sub-interface, multi-word and non-numeric BVI targets."""
    if not name or "." in name or any(c.isspace() for c in name):
        raise ValidationError(ErrorKind.INVALID_INTERFACE_NAME, interface=name, line=line)

    bvi = BVI_PATTERN.match(name)
    if bvi and not bvi.group(1).isdigit():
        raise ValidationError(ErrorKind.INVALID_INTERFACE_NAME, interface=name, line=line)


class DirectiveValidator:
    """Turn a parsed change document into a validated ChangeDirectiveSet."""

    def interpret(
        self,
        tree: Iterable[Node],
        base: BaseConfigModel,
    ) -> ChangeDirectiveSet:
        """
        Interpret and validate a change document.

        The VLAN database is collected up front so it may appear anywhere in
        the document; its own errors are still raised at their position.

        Args:
            tree: Top-level nodes of the (indent-normalized) change input
            base: Model of the base configuration

        Returns:
            ChangeDirectiveSet with directives in first-reference order

        Raises:
            ValidationError: First violation in document order
        """
        nodes = list(tree)
        result = ChangeDirectiveSet(vlan_database=self._collect_database(nodes))

        for node in nodes:
            if isinstance(node, Block):
                if node.name == VLAN_DATABASE_BLOCK:
                    for stmt in node.statements():
                        self._check_vlan_entry(stmt)
                elif node.name.startswith("interface "):
                    self._interface_block(node, base, result)
            else:
                if node.text.startswith("vlan "):
                    self._check_vlan_entry(node)
                elif node.text.startswith("interface "):
                    self._interface_statement(node, result)

        self._check_descriptions(result, base)

        logger.debug(
            f"Interpreted {len(result.directives)} interface directives, "
            f"{len(result.vlan_database)} VLAN database entries"
        )
        return result

    # --- VLAN database ---

    def _database_statements(self, nodes: list[Node]) -> list[Statement]:
        statements = []
        for node in nodes:
            if isinstance(node, Block) and node.name == VLAN_DATABASE_BLOCK:
                statements.extend(node.statements())
            elif isinstance(node, Statement) and node.text.startswith("vlan "):
                statements.append(node)
        return statements

    def _collect_database(self, nodes: list[Node]) -> dict[int, VlanDatabaseEntry]:
        """Named VLAN entries, in declaration order. Invalid ones are skipped here."""
        database: dict[int, VlanDatabaseEntry] = {}
        for stmt in self._database_statements(nodes):
            match = VLAN_ENTRY_PATTERN.match(stmt.text)
            if not match:
                continue
            name = (match.group(2) or "").strip()
            if name:
                vlan_id = int(match.group(1))
                database[vlan_id] = VlanDatabaseEntry(vlan_id, name, stmt.line)
        return database

    def _check_vlan_entry(self, stmt: Statement) -> None:
        match = VLAN_ENTRY_PATTERN.match(stmt.text)
        if match and not (match.group(2) or "").strip():
            raise ValidationError(
                ErrorKind.VLAN_NAME_REQUIRED,
                vlan=int(match.group(1)),
                line=stmt.line,
            )

    # --- Interfaces ---

    def _directive(
        self,
        result: ChangeDirectiveSet,
        name: str,
        line: int,
    ) -> InterfaceDirective:
        """Fetch or create the directive for ``name``, keeping first-reference order."""
        directive = result.directives.get(name)
        if directive is None:
            directive = InterfaceDirective(name=name, line=line)
            result.directives[name] = directive
        return directive

    def _interface_statement(self, stmt: Statement, result: ChangeDirectiveSet) -> None:
        """A bare ``interface X`` line: only meaningful for BVIs."""
        name = stmt.text[len("interface "):].strip()
        check_interface_name(name, stmt.line)

        if not name.startswith("BVI"):
            raise ValidationError(
                ErrorKind.EMPTY_INTERFACE_BLOCK,
                interface=name,
                line=stmt.line,
            )

        self._directive(result, name, stmt.line)

    def _interface_block(
        self,
        block: Block,
        base: BaseConfigModel,
        result: ChangeDirectiveSet,
    ) -> None:
        name = block.name[len("interface "):].strip()
        check_interface_name(name, block.line)
        directive = self._directive(result, name, block.line)

        if directive.is_bvi:
            # L3 configuration is opaque
            directive.passthrough.extend(s.text for s in block.statements())
            return

        current = base.current_vlans(name)
        supported = False

        for stmt in block.statements():
            text = stmt.text

            desc = DESCRIPTION_PATTERN.match(text)
            if desc:
                directive.description = desc.group(1).strip()
                directive.passthrough.append(f"description {directive.description}")
                supported = True
                continue

            if TRUNK_MODE_PATTERN.match(text):
                directive.trunk_mode = True
                supported = True
                continue

            mode = ANY_MODE_PATTERN.match(text)
            if mode:
                raise ValidationError(
                    ErrorKind.UNSUPPORTED_SWITCHPORT_MODE,
                    interface=name,
                    line=stmt.line,
                    detail=mode.group(1).strip(),
                )

            if ACCESS_VLAN_PATTERN.match(text):
                raise ValidationError(
                    ErrorKind.UNSUPPORTED_SWITCHPORT_MODE,
                    interface=name,
                    line=stmt.line,
                    detail="access",
                )

            operation = self._vlan_operation(stmt, name)
            if operation:
                self._check_operation(operation, name, base, current, result)
                directive.operations.append(operation)
                supported = True
                continue

            if text.startswith("switchport"):
                logger.debug(f"Ignoring unsupported statement on {name}: {text}")
                continue

            directive.passthrough.append(text)
            supported = True

        if not supported:
            raise ValidationError(
                ErrorKind.EMPTY_INTERFACE_BLOCK,
                interface=name,
                line=block.line,
            )

    def _check_descriptions(self, result: ChangeDirectiveSet, base: BaseConfigModel) -> None:
        """Every non-BVI target needs a description from the change or the base.

        Runs once the whole document is read, so a description may come from
        any block for the interface.
        """
        for name, directive in result.directives.items():
            if directive.is_bvi or directive.description:
                continue
            base_interface = base.interface(name)
            if base_interface and base_interface.description:
                continue
            raise ValidationError(
                ErrorKind.MISSING_DESCRIPTION,
                interface=name,
                line=directive.line,
            )

    def _vlan_operation(self, stmt: Statement, name: str) -> Optional[VlanOperation]:
        """Parse a ``switchport trunk allowed vlan`` statement, if it is one."""
        if TRUNK_NONE_PATTERN.match(stmt.text):
            return VlanOperation(VlanAction.CLEAR, (), stmt.line)

        match = TRUNK_OP_PATTERN.match(stmt.text)
        if not match:
            return None

        try:
            vlans = parse_vlan_list(match.group(2) or "")
        except ValidationError as e:
            # Attach position and interface to the token error
            raise ValidationError(
                e.kind,
                interface=name,
                line=stmt.line,
                detail=e.detail,
            ) from e

        return VlanOperation(VlanAction(match.group(1)), tuple(vlans), stmt.line)

    def _check_operation(
        self,
        operation: VlanOperation,
        name: str,
        base: BaseConfigModel,
        current: set[int],
        result: ChangeDirectiveSet,
    ) -> None:
        """Validate one VLAN operation against the base model and database."""
        base_interface = base.interface(name)

        if base_interface and base_interface.bundle_id is not None:
            raise ValidationError(
                ErrorKind.BUNDLED_INTERFACE_REJECTED,
                interface=name,
                line=operation.line,
                detail=str(base_interface.bundle_id),
            )

        if operation.action == VlanAction.ADD:
            for vlan in operation.vlans:
                if vlan not in result.vlan_database and vlan not in current:
                    raise ValidationError(
                        ErrorKind.VLAN_NOT_IN_DATABASE,
                        interface=name,
                        vlan=vlan,
                        line=operation.line,
                    )

        elif operation.action == VlanAction.REMOVE:
            for vlan in operation.vlans:
                if vlan not in current:
                    raise ValidationError(
                        ErrorKind.VLAN_NOT_PRESENT_IN_BASE,
                        interface=name,
                        vlan=vlan,
                        line=base_interface.line if base_interface else operation.line,
                    )
