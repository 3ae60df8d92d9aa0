"""Simplified rendering and lint of a base configuration.

The simplified view collapses l2transport sub-interfaces and bridge-domains
back into switch-style trunk statements plus a vlan database. Lint findings
are advisory and never stop analysis.
"""
import logging

from .model import SUBINTERFACE_NAME_PATTERN
from .schema import (
    BaseConfigModel,
    BaseInterface,
    BridgeDomain,
    LintFinding,
    RenderResult,
    SubInterface,
)

logger = logging.getLogger(__name__)

INDENT = "  "
L3_REDUCED = "! -- L3 config reduced --"


class ConfigRenderer:
    """Render the simplified view and lint findings of a base config."""

    def render(self, base: BaseConfigModel) -> RenderResult:
        """
        Render a base model.

        Args:
            base: Model from ModelExtractor.extract

        Returns:
            RenderResult with simplified text, findings and grouped lint text
        """
        findings = self.lint(base)
        result = RenderResult(
            simplified_config=self._simplified(base),
            findings=findings,
            lint_output=format_findings(findings),
        )
        logger.debug(f"Rendered base config with {len(findings)} lint findings")
        return result

    # --- Simplified view ---

    def _bundle_owner(self, interface: BaseInterface, base: BaseConfigModel) -> bool:
        """True if this member's Bundle-Ether owner is declared in the base."""
        return interface.bundle_name is not None and interface.bundle_name in base.interfaces

    def _simplified(self, base: BaseConfigModel) -> str:
        lines: list[str] = []

        members: dict[str, list[BaseInterface]] = {}
        for interface in base.interfaces.values():
            if self._bundle_owner(interface, base):
                members.setdefault(interface.bundle_name, []).append(interface)

        for name in self._trunk_order(base):
            interface = base.interface(name)
            if interface and (interface.is_bvi or self._bundle_owner(interface, base)):
                continue

            vlans = sorted(base.current_vlans(name))
            statements = list(interface.statements) if interface else []
            if not statements and not vlans:
                continue

            lines.append(f"interface {name}")
            lines.extend(f"{INDENT}{stmt}" for stmt in statements)
            if vlans:
                lines.append(f"{INDENT}switchport mode trunk")
                lines.extend(f"{INDENT}switchport trunk allowed vlan add {vlan}" for vlan in vlans)
            lines.append("")

            for member in members.get(name, []):
                lines.append(f"interface {member.name}")
                lines.extend(f"{INDENT}{stmt}" for stmt in member.statements)
                lines.append("")

        for interface in base.interfaces.values():
            if not interface.is_bvi:
                continue
            lines.append(f"interface {interface.name}")
            if interface.description:
                lines.append(f"{INDENT}description {interface.description}")
            lines.append(f"{INDENT}{L3_REDUCED}")
            lines.append("")

        vlan_names: dict[int, str] = {}
        for domain in base.bridge_domains:
            if domain.vlan_tag not in vlan_names or not vlan_names[domain.vlan_tag]:
                vlan_names[domain.vlan_tag] = domain.description or ""

        if vlan_names:
            lines.append("vlan database")
            for vlan in sorted(vlan_names):
                if vlan_names[vlan]:
                    lines.append(f"{INDENT}vlan {vlan} name {vlan_names[vlan]}")
                else:
                    lines.append(f"{INDENT}vlan {vlan}")

        while lines and not lines[-1]:
            lines.pop()

        return "\n".join(lines)

    def _trunk_order(self, base: BaseConfigModel) -> list[str]:
        """Declared interfaces first, then ones only known through their sub-interfaces."""
        names = list(base.interfaces)
        seen = set(names)

        referenced = list(base.subinterfaces)
        for domain in base.bridge_domains:
            for member in domain.members:
                match = SUBINTERFACE_NAME_PATTERN.match(member)
                if match:
                    referenced.append(match.group(1))

        for name in referenced:
            if name not in seen:
                seen.add(name)
                names.append(name)
        return names

    # --- Lint ---

    def lint(self, base: BaseConfigModel) -> list[LintFinding]:
        """Collect advisory findings in a stable order."""
        findings: list[LintFinding] = []

        for subs in base.subinterfaces.values():
            for sub in subs:
                findings.extend(self._lint_subinterface(sub))

        for domain in base.bridge_domains:
            findings.extend(self._lint_domain(domain))

        for interface in base.interfaces.values():
            if interface.bundle_id is None:
                continue
            owned = base.subinterfaces.get(interface.name, [])
            if owned:
                findings.append(LintFinding(
                    subject=f"interface {interface.name}",
                    message=(
                        f"bundle member of {interface.bundle_name} owns l2transport "
                        f"sub-interfaces: {', '.join(s.name for s in owned)}"
                    ),
                    line=interface.line,
                ))

        return findings

    def _lint_subinterface(self, sub: SubInterface) -> list[LintFinding]:
        subject = f"interface {sub.name} l2transport"
        findings = []
        if sub.encapsulation != sub.vlan_tag:
            findings.append(LintFinding(
                subject, "sub-interface number does not match encapsulation tag", sub.line,
            ))
        if not sub.has_rewrite:
            findings.append(LintFinding(
                subject, "rewrite ingress tag pop 1 symmetric is missing", sub.line,
            ))
        return findings

    def _lint_domain(self, domain: BridgeDomain) -> list[LintFinding]:
        subject = f"bridge-domain {domain.name}"
        findings = []

        for member in domain.members + domain.routed:
            if member.startswith("BVI"):
                suffix = member[len("BVI"):]
                if suffix.isdigit() and int(suffix) != domain.vlan_tag:
                    findings.append(LintFinding(
                        subject, f"BVI number differs from bridge-domain name: {member}", domain.line,
                    ))
                continue

            match = SUBINTERFACE_NAME_PATTERN.match(member)
            if match and int(match.group(2)) != domain.vlan_tag:
                findings.append(LintFinding(
                    subject,
                    f"sub-interface number differs from bridge-domain name: {member}",
                    domain.line,
                ))

        return findings


def format_findings(findings: list[LintFinding]) -> str:
    """Group findings under ``--- {subject} ---`` headers, in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for finding in findings:
        grouped.setdefault(finding.subject, []).append(finding.message)

    output = ""
    for subject, messages in grouped.items():
        output += f"--- {subject} ---\n"
        output += "\n".join(messages) + "\n"
    return output
