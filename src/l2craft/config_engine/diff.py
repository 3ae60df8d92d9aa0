"""Diff engine for calculating changes between base config and change input.

Computes the minimal set of changes needed to reach the desired state.
"""
from typing import Optional

from .schema import (
    BaseConfigModel,
    BridgeDomainChange,
    ChangeDirectiveSet,
    ChangePlan,
    InterfaceDirective,
    InterfaceUpdate,
    SubInterfaceCreation,
)


class DiffEngine:
    """Calculate differences between the base config and validated directives."""

    def calculate(
        self,
        base: BaseConfigModel,
        directives: ChangeDirectiveSet,
    ) -> ChangePlan:
        """
        Calculate the change plan.

        Args:
            base: Model of the base configuration
            directives: Validated change directives

        Returns:
            ChangePlan with all changes needed (empty when already applied)
        """
        plan = ChangePlan()

        for name, directive in directives.directives.items():
            update = self._interface_update(directive, base)
            if update:
                plan.interface_updates.append(update)

            if directive.is_bvi:
                self._diff_routed(directive, base, directives, plan)
            elif directive.has_vlan_operations:
                self._diff_vlans(directive, base, directives, plan)

        return plan

    def _interface_update(
        self,
        directive: InterfaceDirective,
        base: BaseConfigModel,
    ) -> Optional[InterfaceUpdate]:
        """
        Lines to apply under the interface itself.

        Returns None if every line is already present in the base.
        """
        existing = base.interface(directive.name)
        present = set(existing.statements) if existing else set()

        lines = []
        for line in directive.passthrough:
            if line not in present and line not in lines:
                lines.append(line)

        if not lines:
            return None
        return InterfaceUpdate(name=directive.name, lines=lines)

    def _diff_vlans(
        self,
        directive: InterfaceDirective,
        base: BaseConfigModel,
        directives: ChangeDirectiveSet,
        plan: ChangePlan,
    ) -> None:
        """Sub-interface removals and additions for one interface."""
        name = directive.name
        current = base.current_vlans(name)
        desired = directive.desired_vlans(current)

        for vlan in sorted(current - desired):
            subif = f"{name}.{vlan}"
            plan.removals.append(subif)
            for domain in base.domains_with_member(subif):
                self._domain_change(domain.vlan_tag, base, directives, plan).removals.append(subif)

        existing = base.interface(name)
        interface_desc = directive.description or (existing.description if existing else None) or ""

        for vlan in sorted(desired - current):
            creation = SubInterfaceCreation(
                base=name,
                vlan=vlan,
                description=self._subinterface_description(vlan, interface_desc, directives),
            )
            plan.additions.append(creation)
            self._domain_change(vlan, base, directives, plan).additions.append(creation.name)

    def _diff_routed(
        self,
        directive: InterfaceDirective,
        base: BaseConfigModel,
        directives: ChangeDirectiveSet,
        plan: ChangePlan,
    ) -> None:
        """Routed membership of ``BVI{n}`` in bridge-domain ``VLAN{n}``."""
        vlan = int(directive.name[len("BVI"):])
        domain = base.domain(vlan)
        if domain and directive.name in domain.routed:
            return

        change = self._domain_change(vlan, base, directives, plan)
        if directive.name not in change.routed_additions:
            change.routed_additions.append(directive.name)

    def _domain_change(
        self,
        vlan: int,
        base: BaseConfigModel,
        directives: ChangeDirectiveSet,
        plan: ChangePlan,
    ) -> BridgeDomainChange:
        change = plan.domain_changes.get(vlan)
        if change is None:
            domain = base.domain(vlan)
            change = BridgeDomainChange(
                vlan_tag=vlan,
                description=directives.vlan_name(vlan) or (domain.description if domain else None),
                created=domain is None,
            )
            plan.domain_changes[vlan] = change
        return change

    def _subinterface_description(
        self,
        vlan: int,
        interface_desc: str,
        directives: ChangeDirectiveSet,
    ) -> str:
        """``{vlanName},{interfaceDescription}``; added VLANs are always named."""
        vlan_name = directives.vlan_name(vlan)
        if vlan_name:
            return f"{vlan_name},{interface_desc}"
        return interface_desc


def summarize_plan(plan: ChangePlan) -> str:
    """
    Create a human-readable summary of a change plan.

    Useful for dry-run output and logging.
    """
    lines = []

    if plan.no_change:
        return "No changes needed - base config already matches change input"

    lines.append(f"Changes to apply ({plan.total_changes} total):")
    lines.append("")

    for update in plan.interface_updates:
        lines.append(f"  [~] Configure interface {update.name}")
        for line in update.lines:
            lines.append(f"      {line}")

    for subif in plan.removals:
        lines.append(f"  [-] Delete sub-interface {subif}")

    for creation in plan.additions:
        lines.append(f"  [+] Create sub-interface {creation.name}")
        lines.append(f"      Description: {creation.description}")

    for vlan in sorted(plan.domain_changes):
        change = plan.domain_changes[vlan]
        marker = "[+]" if change.created else "[~]"
        verb = "Create" if change.created else "Modify"
        lines.append(f"  {marker} {verb} bridge-domain VLAN{vlan}")
        if change.removals:
            lines.append(f"      Remove: {', '.join(change.removals)}")
        if change.additions:
            lines.append(f"      Add: {', '.join(change.additions)}")
        if change.routed_additions:
            lines.append(f"      Routed: {', '.join(change.routed_additions)}")

    return "\n".join(lines)
