"""Command generator for IOS-XR style change output.

Turns a ChangePlan into the ordered command text pasted onto the device.
"""
from .schema import BridgeDomainChange, ChangePlan

REWRITE_LINE = "rewrite ingress tag pop 1 symmetric"
INDENT = "  "


class CommandGenerator:
    """Generate change commands from a change plan."""

    def generate(self, plan: ChangePlan) -> str:
        """
        Generate change output.

        Sections, in order: interface updates, sub-interface removals,
        sub-interface additions, then a single l2vpn tree.

        Args:
            plan: Change plan from DiffEngine.calculate

        Returns:
            Command text, empty string when nothing changes
        """
        lines: list[str] = []

        for update in plan.interface_updates:
            lines.append(f"interface {update.name}")
            lines.extend(f"{INDENT}{line}" for line in update.lines)
            lines.append("exit")
            lines.append("")

        if plan.removals:
            lines.extend(f"no interface {subif} l2transport" for subif in plan.removals)
            lines.append("")

        for creation in plan.additions:
            lines.extend([
                f"interface {creation.name} l2transport",
                f"{INDENT}description {creation.description}",
                f"{INDENT}encapsulation dot1q {creation.vlan}",
                f"{INDENT}{REWRITE_LINE}",
                "exit",
                "",
            ])

        touched = [
            plan.domain_changes[vlan]
            for vlan in sorted(plan.domain_changes)
            if plan.domain_changes[vlan].has_changes
        ]
        if touched:
            lines.append("l2vpn")
            lines.append(f"{INDENT}bridge group VLAN")
            for change in touched:
                lines.extend(self._domain_lines(change))
            lines.append(f"{INDENT}exit")
            lines.append("exit")

        while lines and not lines[-1]:
            lines.pop()

        return "\n".join(lines)

    def _domain_lines(self, change: BridgeDomainChange) -> list[str]:
        """One ``bridge-domain`` block, indented for the bridge group."""
        outer = INDENT * 2
        inner = INDENT * 3

        lines = [f"{outer}bridge-domain VLAN{change.vlan_tag}"]
        if change.description:
            lines.append(f"{inner}description {change.description}")

        lines.extend(f"{inner}no interface {subif}" for subif in change.removals)

        for subif in change.additions:
            lines.append(f"{inner}interface {subif}")
            lines.append(f"{inner}exit")

        for bvi in change.routed_additions:
            lines.append(f"{inner}routed interface {bvi}")
            lines.append(f"{inner}exit")

        lines.append(f"{outer}exit")
        return lines
