"""Tests for change planning and command generation."""
import pytest

from l2craft.config_engine import (
    CommandGenerator,
    ConfigEngine,
    ErrorKind,
    ValidationError,
    summarize_plan,
)
from l2craft.config_engine.schema import (
    BridgeDomainChange,
    ChangePlan,
    InterfaceUpdate,
    SubInterfaceCreation,
)

REWRITE = "  rewrite ingress tag pop 1 symmetric"


def subif_block(name: str, vlan: int, description: str) -> list[str]:
    return [
        f"interface {name}.{vlan} l2transport",
        f"  description {description}",
        f"  encapsulation dot1q {vlan}",
        REWRITE,
        "exit",
        "",
    ]


def change(engine: ConfigEngine, base: str, change_input: str) -> str:
    return engine.generate_change_config(base, change_input).change_output


class TestCommandGenerator:
    """Tests for CommandGenerator on hand-built plans."""

    def test_empty_plan(self):
        """Nothing to do produces an empty string."""
        assert CommandGenerator().generate(ChangePlan()) == ""

    def test_sections_in_order(self):
        """Updates, removals, additions, then the l2vpn tree."""
        plan = ChangePlan(
            interface_updates=[InterfaceUpdate("Gi0/0/0/1", ["mtu 9000"])],
            removals=["Gi0/0/0/1.10", "Gi0/0/0/1.11"],
            additions=[SubInterfaceCreation("Gi0/0/0/1", 20, "web,uplink")],
            domain_changes={
                20: BridgeDomainChange(20, "web", created=True, additions=["Gi0/0/0/1.20"]),
                10: BridgeDomainChange(10, None, removals=["Gi0/0/0/1.10"]),
            },
        )

        output = CommandGenerator().generate(plan)

        assert output == "\n".join([
            "interface Gi0/0/0/1",
            "  mtu 9000",
            "exit",
            "",
            "no interface Gi0/0/0/1.10 l2transport",
            "no interface Gi0/0/0/1.11 l2transport",
            "",
            *subif_block("Gi0/0/0/1", 20, "web,uplink"),
            "l2vpn",
            "  bridge group VLAN",
            "    bridge-domain VLAN10",
            "      no interface Gi0/0/0/1.10",
            "    exit",
            "    bridge-domain VLAN20",
            "      description web",
            "      interface Gi0/0/0/1.20",
            "      exit",
            "    exit",
            "  exit",
            "exit",
        ])

    def test_trailing_blank_lines_trimmed(self):
        """Output never ends with a blank line."""
        plan = ChangePlan(removals=["Gi0/0/0/1.10"])

        assert CommandGenerator().generate(plan) == "no interface Gi0/0/0/1.10 l2transport"


class TestChangeScenarios:
    """End-to-end change generation against the shared base config."""

    def test_add_and_remove_with_l2vpn_update(self, engine, base_config):
        """Removal, addition and both bridge-domains appear in order."""
        output = change(engine, base_config, (
            "vlan database\n"
            "  vlan 400 name storage\n"
            "\n"
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan add 400\n"
            "  switchport trunk allowed vlan remove 300\n"
        ))

        assert output == "\n".join([
            "no interface FortyGigE0/0/0/46.300 l2transport",
            "",
            *subif_block("FortyGigE0/0/0/46", 400, "storage,To:server1"),
            "l2vpn",
            "  bridge group VLAN",
            "    bridge-domain VLAN300",
            "      description servers",
            "      no interface FortyGigE0/0/0/46.300",
            "    exit",
            "    bridge-domain VLAN400",
            "      description storage",
            "      interface FortyGigE0/0/0/46.400",
            "      exit",
            "    exit",
            "  exit",
            "exit",
        ])

    def test_multi_interface_order(self, engine, base_config):
        """Interfaces in reference order, VLANs ascending, domains ascending."""
        output = change(engine, base_config, (
            "vlan database\n"
            "  vlan 300 name servers\n"
            "  vlan 301 name storage\n"
            "  vlan 500 name web\n"
            "\n"
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan remove 300\n"
            "  switchport trunk allowed vlan add 500 301\n"
            "interface FortyGigE0/0/0/47\n"
            "  switchport trunk allowed vlan add 300 500\n"
            "interface BVI500\n"
        ))

        assert output == "\n".join([
            "no interface FortyGigE0/0/0/46.300 l2transport",
            "",
            *subif_block("FortyGigE0/0/0/46", 301, "storage,To:server1"),
            *subif_block("FortyGigE0/0/0/46", 500, "web,To:server1"),
            *subif_block("FortyGigE0/0/0/47", 300, "servers,To:server2"),
            *subif_block("FortyGigE0/0/0/47", 500, "web,To:server2"),
            "l2vpn",
            "  bridge group VLAN",
            "    bridge-domain VLAN300",
            "      description servers",
            "      no interface FortyGigE0/0/0/46.300",
            "      interface FortyGigE0/0/0/47.300",
            "      exit",
            "    exit",
            "    bridge-domain VLAN301",
            "      description storage",
            "      interface FortyGigE0/0/0/46.301",
            "      exit",
            "    exit",
            "    bridge-domain VLAN500",
            "      description web",
            "      interface FortyGigE0/0/0/46.500",
            "      exit",
            "      interface FortyGigE0/0/0/47.500",
            "      exit",
            "      routed interface BVI500",
            "      exit",
            "    exit",
            "  exit",
            "exit",
        ])

    def test_passthrough_only(self, engine, base_config):
        """Passthrough lines produce an interface block and nothing else."""
        output = change(engine, base_config, (
            "interface FortyGigE0/0/0/47\n"
            "  description To:server2-new\n"
            "  mtu 9000\n"
            "  shutdown\n"
        ))

        assert output == (
            "interface FortyGigE0/0/0/47\n"
            "  description To:server2-new\n"
            "  mtu 9000\n"
            "  shutdown\n"
            "exit"
        )

    def test_unchanged_lines_not_reemitted(self, engine, base_config):
        """Lines already in the base interface are skipped."""
        output = change(engine, base_config, (
            "interface FortyGigE0/0/0/46\n"
            "  description To:server1\n"
            "  mtu 9216\n"
            "  switchport mode trunk\n"
        ))

        assert output == ""

    def test_interface_update_before_subinterfaces(self, engine, base_config):
        """Interface blocks come first and new descriptions feed sub-interfaces."""
        output = change(engine, base_config, (
            "vlan database\n"
            "  vlan 500 name web\n"
            "interface FortyGigE0/0/0/47\n"
            "  description To:server2-new\n"
            "  switchport trunk allowed vlan add 500\n"
        ))

        lines = output.splitlines()
        assert lines[:4] == [
            "interface FortyGigE0/0/0/47",
            "  description To:server2-new",
            "exit",
            "",
        ]
        assert "  description web,To:server2-new" in lines

    def test_bundle_member_passthrough(self, engine, base_config):
        """Bundle members accept non-VLAN changes."""
        output = change(engine, base_config, "interface TenGigE0/0/0/1\n  shutdown\n")

        assert output == "interface TenGigE0/0/0/1\n  shutdown\nexit"

    def test_bundle_member_vlans_rejected(self, engine, base_config):
        """VLAN changes on a bundle member raise."""
        with pytest.raises(ValidationError) as exc:
            engine.generate_change_config(
                base_config,
                "interface TenGigE0/0/0/1\n  switchport trunk allowed vlan add 300\n",
            )

        assert exc.value.kind == ErrorKind.BUNDLED_INTERFACE_REJECTED
        assert "Bundle-Ether100" in str(exc.value)

    def test_new_bvi(self, engine, base_config):
        """A new BVI passes its L3 lines through and joins its domain."""
        output = change(engine, base_config, (
            "interface BVI500\n"
            "  ipv4 address 198.51.100.1 255.255.255.0\n"
        ))

        assert output == "\n".join([
            "interface BVI500",
            "  ipv4 address 198.51.100.1 255.255.255.0",
            "exit",
            "",
            "l2vpn",
            "  bridge group VLAN",
            "    bridge-domain VLAN500",
            "      routed interface BVI500",
            "      exit",
            "    exit",
            "  exit",
            "exit",
        ])

    def test_existing_bvi_membership_not_repeated(self, engine, base_config):
        """A BVI already routed in its domain produces no l2vpn change."""
        assert change(engine, base_config, "interface BVI300\n") == ""

    def test_join_existing_domain_without_description(self, engine):
        """The database name describes both the sub-interface and the domain."""
        base = (
            "interface Gi0/0/0/1\n"
            "  description uplink\n"
            "interface Gi0/0/0/1.10 l2transport\n"
            "  encapsulation dot1q 10\n"
            "l2vpn\n"
            "  bridge group VLAN\n"
            "    bridge-domain VLAN10\n"
            "      interface Gi0/0/0/1.10\n"
            "    bridge-domain VLAN20\n"
            "      interface Gi0/0/0/2.20\n"
        )

        output = change(engine, base, (
            "vlan database\n"
            "  vlan 20 name web\n"
            "interface Gi0/0/0/1\n"
            "  switchport trunk allowed vlan add 20\n"
        ))

        lines = output.splitlines()
        assert "  description web,uplink" in lines
        assert lines[lines.index("    bridge-domain VLAN20") + 1] == "      description web"

    def test_database_name_overrides_domain_description(self, engine, base_config):
        """A declared VLAN name replaces the base domain description."""
        output = change(engine, base_config, (
            "vlan database\n"
            "  vlan 300 name servers-new\n"
            "interface FortyGigE0/0/0/47\n"
            "  switchport trunk allowed vlan add 300\n"
        ))

        lines = output.splitlines()
        assert "      description servers-new" in lines
        assert "  description servers-new,To:server2" in lines


class TestNoneDominance:
    """Tests for switchport trunk allowed vlan none."""

    def test_none_after_add_clears_everything(self, engine, base_config):
        """none wins over earlier operations and removes existing VLANs."""
        output = change(engine, base_config, (
            "vlan database\n"
            "  vlan 400 name storage\n"
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan add 400\n"
            "  switchport trunk allowed vlan none\n"
        ))

        assert output == "\n".join([
            "no interface FortyGigE0/0/0/46.300 l2transport",
            "",
            "l2vpn",
            "  bridge group VLAN",
            "    bridge-domain VLAN300",
            "      description servers",
            "      no interface FortyGigE0/0/0/46.300",
            "    exit",
            "  exit",
            "exit",
        ])

    def test_add_after_none_keeps_existing(self, engine, base_config):
        """Re-adding an existing VLAN after none produces no churn."""
        output = change(engine, base_config, (
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan none\n"
            "  switchport trunk allowed vlan add 300\n"
        ))

        assert output == ""

    def test_remove_then_add_is_noop(self, engine, base_config):
        """Last writer wins on the desired set."""
        output = change(engine, base_config, (
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan remove 300\n"
            "  switchport trunk allowed vlan add 300\n"
        ))

        assert output == ""


class TestIdempotence:
    """Re-applying a change to the updated base produces nothing."""

    def test_reapply_after_update(self, engine, base_config):
        """A change applied to its own result is empty."""
        change_input = (
            "vlan database\n"
            "  vlan 400 name storage\n"
            "interface FortyGigE0/0/0/46\n"
            "  description To:server1\n"
            "  mtu 9216\n"
            "  switchport trunk allowed vlan add 400\n"
        )
        first = change(engine, base_config, change_input)
        assert "interface FortyGigE0/0/0/46.400 l2transport" in first

        updated = base_config.replace(
            "interface FortyGigE0/0/0/47\n",
            "interface FortyGigE0/0/0/46.400 l2transport\n"
            "  description storage,To:server1\n"
            "  encapsulation dot1q 400\n"
            "  rewrite ingress tag pop 1 symmetric\n"
            "interface FortyGigE0/0/0/47\n",
        ) + (
            "l2vpn\n"
            "  bridge group VLAN\n"
            "    bridge-domain VLAN400\n"
            "      description storage\n"
            "      interface FortyGigE0/0/0/46.400\n"
        )

        assert change(engine, updated, change_input) == ""


class TestSummarizePlan:
    """Tests for summarize_plan."""

    def test_no_change(self):
        """Empty plans say so."""
        assert summarize_plan(ChangePlan()).startswith("No changes needed")

    def test_summary_lists_changes(self, engine, base_config):
        """Each change kind is listed."""
        plan = engine.plan(base_config, (
            "vlan database\n"
            "  vlan 400 name storage\n"
            "interface FortyGigE0/0/0/46\n"
            "  switchport trunk allowed vlan add 400\n"
            "  switchport trunk allowed vlan remove 300\n"
        ))

        summary = summarize_plan(plan)

        assert "Changes to apply (4 total):" in summary
        assert "[-] Delete sub-interface FortyGigE0/0/0/46.300" in summary
        assert "[+] Create sub-interface FortyGigE0/0/0/46.400" in summary
        assert "[+] Create bridge-domain VLAN400" in summary
        assert "[~] Modify bridge-domain VLAN300" in summary

    def test_empty_inputs(self, engine):
        """Empty base and change inputs plan nothing."""
        assert engine.plan("", "").no_change
