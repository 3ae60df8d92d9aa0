"""Semantic model extraction for base configurations.

Walks the parse tree of a base document and reconstructs interfaces,
l2transport sub-interfaces, bundle membership and L2VPN bridge-domains.
Unrecognized blocks and statements are ignored, never reported.
"""
import logging
import re
from dataclasses import replace
from typing import Iterable, Optional

from .schema import (
    BaseConfigModel,
    BaseInterface,
    Block,
    BridgeDomain,
    Node,
    Statement,
    SubInterface,
)

logger = logging.getLogger(__name__)

INTERFACE_PATTERN = re.compile(r"^interface (\S+)$")
SUBINTERFACE_PATTERN = re.compile(r"^interface ([^.\s]+)\.(\d+) l2transport$")
SUBINTERFACE_NAME_PATTERN = re.compile(r"^([^.\s]+)\.(\d+)$")
ENCAPSULATION_PATTERN = re.compile(r"^encapsulation dot1q (\d+)$")
BUNDLE_PATTERN = re.compile(r"^bundle id (\d+) mode \S+")
BRIDGE_DOMAIN_PATTERN = re.compile(r"^bridge-domain VLAN(\d+)$")
MEMBER_PATTERN = re.compile(r"^interface (\S+)$")
ROUTED_MEMBER_PATTERN = re.compile(r"^routed interface (\S+)$")

REWRITE_STATEMENT = "rewrite ingress tag pop 1 symmetric"
L2VPN_BLOCK = "l2vpn"
BRIDGE_GROUP_BLOCK = "bridge group VLAN"


def find_description(statements: Iterable[Statement]) -> Optional[str]:
    """First ``description ...`` value, if any."""
    for stmt in statements:
        if stmt.text.startswith("description "):
            return stmt.text[len("description "):].strip()
    return None


class ModelExtractor:
    """Build a BaseConfigModel from a parsed base config."""

    def extract(self, tree: Iterable[Node]) -> BaseConfigModel:
        """
        Extract the semantic model.

        Args:
            tree: Top-level nodes from ConfigParser.parse

        Returns:
            BaseConfigModel (interfaces and sub-interfaces in declaration
            order, all bridge-domains of every ``bridge group VLAN``)
        """
        model = BaseConfigModel()

        for node in tree:
            if not isinstance(node, Block):
                continue

            if node.name == L2VPN_BLOCK:
                model.bridge_domains.extend(self._bridge_domains(node))
                continue

            sub_match = SUBINTERFACE_PATTERN.match(node.name)
            if sub_match:
                sub = self._subinterface(node, sub_match.group(1), int(sub_match.group(2)))
                model.subinterfaces.setdefault(sub.base, []).append(sub)
                continue

            if_match = INTERFACE_PATTERN.match(node.name)
            if if_match and "." not in if_match.group(1):
                interface = self._interface(node, if_match.group(1))
                existing = model.interfaces.get(interface.name)
                if existing:
                    interface = self._merge(existing, interface)
                model.interfaces[interface.name] = interface

        logger.debug(
            f"Extracted {len(model.interfaces)} interfaces, "
            f"{sum(len(v) for v in model.subinterfaces.values())} sub-interfaces, "
            f"{len(model.bridge_domains)} bridge-domains"
        )
        return model

    def _interface(self, block: Block, name: str) -> BaseInterface:
        """Parse a plain interface block."""
        statements = block.statements()
        bundle_id = None
        for stmt in statements:
            match = BUNDLE_PATTERN.match(stmt.text)
            if match:
                bundle_id = int(match.group(1))
                break

        return BaseInterface(
            name=name,
            line=block.line,
            description=find_description(statements),
            statements=tuple(s.text for s in statements),
            bundle_id=bundle_id,
        )

    def _merge(self, first: BaseInterface, second: BaseInterface) -> BaseInterface:
        """Fold a repeated interface block into the first declaration."""
        return replace(
            first,
            description=second.description or first.description,
            statements=first.statements + second.statements,
            bundle_id=second.bundle_id if second.bundle_id is not None else first.bundle_id,
        )

    def _subinterface(self, block: Block, base: str, vlan_tag: int) -> SubInterface:
        """Parse an l2transport sub-interface block."""
        statements = block.statements()
        encapsulation = None
        for stmt in statements:
            match = ENCAPSULATION_PATTERN.match(stmt.text)
            if match:
                encapsulation = int(match.group(1))
                break

        return SubInterface(
            base=base,
            vlan_tag=vlan_tag,
            line=block.line,
            encapsulation=encapsulation,
            description=find_description(statements),
            has_rewrite=any(s.text == REWRITE_STATEMENT for s in statements),
        )

    def _bridge_domains(self, l2vpn: Block) -> list[BridgeDomain]:
        """Collect ``bridge group VLAN / bridge-domain VLAN{n}`` entries."""
        domains = []
        for group in l2vpn.blocks():
            if group.name != BRIDGE_GROUP_BLOCK:
                continue

            for node in group.children:
                name = node.name if isinstance(node, Block) else node.text
                match = BRIDGE_DOMAIN_PATTERN.match(name)
                if not match:
                    continue

                children = node.children if isinstance(node, Block) else ()
                members = []
                routed = []
                for child in children:
                    # members with attachment settings parse as blocks
                    text = child.name if isinstance(child, Block) else child.text
                    routed_match = ROUTED_MEMBER_PATTERN.match(text)
                    if routed_match:
                        routed.append(routed_match.group(1))
                        continue
                    member_match = MEMBER_PATTERN.match(text)
                    if member_match:
                        members.append(member_match.group(1))

                domains.append(BridgeDomain(
                    vlan_tag=int(match.group(1)),
                    line=node.line,
                    description=find_description(s for s in children if isinstance(s, Statement)),
                    members=tuple(members),
                    routed=tuple(routed),
                ))

        return domains
