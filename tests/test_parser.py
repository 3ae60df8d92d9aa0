"""Tests for the hierarchical config parser."""
import logging

from l2craft.config_engine import Block, ConfigParser, Statement, normalize_indent


class TestConfigParser:
    """Tests for ConfigParser."""

    def test_parse_block_and_statement(self):
        """Deeper indentation on the next line opens a block."""
        text = "interface A\n  description x\n  mtu 9000\ninterface B"

        nodes = ConfigParser().parse(text)

        assert nodes == (
            Block(
                "interface A",
                (Statement("description x", 2), Statement("mtu 9000", 3)),
                1,
            ),
            Statement("interface B", 4),
        )

    def test_comments_and_blank_lines_dropped(self):
        """Comment and blank lines produce no node and keep nesting."""
        text = "interface A\n!\n\n  description x\n!\ninterface B\n  mtu 1"

        nodes = ConfigParser().parse(text)

        assert len(nodes) == 2
        assert nodes[0].children == (Statement("description x", 4),)
        assert nodes[1].name == "interface B"
        assert nodes[1].line == 6

    def test_nested_blocks(self):
        """Three levels of nesting are preserved."""
        text = (
            "l2vpn\n"
            "  bridge group VLAN\n"
            "    bridge-domain VLAN300\n"
            "      interface Gi0/0/0/1.300\n"
        )

        nodes = ConfigParser().parse(text)

        group = nodes[0].blocks()[0]
        domain = group.blocks()[0]
        assert group.name == "bridge group VLAN"
        assert domain.name == "bridge-domain VLAN300"
        assert domain.statements() == [Statement("interface Gi0/0/0/1.300", 4)]

    def test_end_set_attached_to_closed_block(self):
        """end-set at the parent's indentation belongs to the block it closes."""
        text = "prefix-set P\n  10.0.0.0/8\nend-set\nrouter static"

        nodes = ConfigParser().parse(text)

        assert nodes[0].name == "prefix-set P"
        assert [s.text for s in nodes[0].statements()] == ["10.0.0.0/8", "end-set"]
        assert nodes[1] == Statement("router static", 4)

    def test_end_policy_after_nested_block(self):
        """end-policy goes to the policy, not to its nested if block."""
        text = (
            "route-policy X\n"
            "  if destination in P then\n"
            "    pass\n"
            "  endif\n"
            "end-policy\n"
        )

        nodes = ConfigParser().parse(text)

        assert len(nodes) == 1
        policy = nodes[0]
        assert policy.blocks()[0].name == "if destination in P then"
        assert [s.text for s in policy.statements()] == ["endif", "end-policy"]

    def test_malformed_indentation_degrades(self):
        """Odd indentation never raises."""
        text = "  a\nb\n    c\n  d"

        nodes = ConfigParser().parse(text)

        assert nodes[0] == Statement("a", 1)
        assert nodes[1].name == "b"
        assert [s.text for s in nodes[1].statements()] == ["c", "d"]

    def test_empty_input(self):
        """Empty text parses to an empty tree."""
        assert ConfigParser().parse("") == ()
        assert ConfigParser().parse("!\n\n!") == ()

    def test_depth_limit_flattens(self, caplog):
        """Lines deeper than max_depth are kept in the deepest block."""
        text = "a\n b\n  c\n   d"

        with caplog.at_level(logging.WARNING):
            nodes = ConfigParser(max_depth=2).parse(text)

        b = nodes[0].blocks()[0]
        assert b.name == "b"
        assert [s.text for s in b.statements()] == ["c", "d"]
        assert "flattened" in caplog.text

    def test_deep_nesting_within_limit(self):
        """Deep but permitted nesting is parsed without recursion limits."""
        depth = 200
        text = "\n".join(" " * i + f"level{i}" for i in range(depth))

        nodes = ConfigParser(max_depth=depth).parse(text)

        node = nodes[0]
        for _ in range(depth - 2):
            node = node.children[0]
        assert node.children == (Statement(f"level{depth - 1}", depth),)

    def test_to_dict(self):
        """Nodes serialize to the block/stmt JSON shape."""
        nodes = ConfigParser().parse("interface A\n  mtu 1")

        assert nodes[0].to_dict() == {
            "type": "block",
            "name": "interface A",
            "stmts": [{"type": "stmt", "stmt": "mtu 1"}],
        }


class TestNormalizeIndent:
    """Tests for normalize_indent."""

    def test_strips_common_indent(self):
        """Shared leading spaces are removed, relative nesting kept."""
        text = "    interface A\n      mtu 1\n\n    interface B   "

        assert normalize_indent(text) == "interface A\n  mtu 1\n\ninterface B"

    def test_preserves_line_numbers(self):
        """Blank lines survive so numbering is unchanged."""
        text = "\n\n  vlan database\n    vlan 5 name x"

        nodes = ConfigParser().parse(normalize_indent(text))

        assert nodes[0].line == 3
        assert nodes[0].children[0].line == 4

    def test_no_indent_unchanged(self):
        """Text without common indentation is returned as is."""
        assert normalize_indent("a\n  b") == "a\n  b"
