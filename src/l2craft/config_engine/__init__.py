"""Config Engine - IOS-XR L2 configuration analysis and change generation.

The Config Engine turns indented device configuration into:
- A node tree (hierarchical parse)
- A simplified, switch-style rendering with lint findings
- The minimal ordered commands that apply a change input to a base config

Usage:
    from l2craft.config_engine import ConfigEngine

    engine = ConfigEngine()
    result = engine.generate_change_config(base_text, '''
    vlan database
      vlan 400 name storage

    interface FortyGigE0/0/0/46
      switchport trunk allowed vlan add 400
    ''')
    print(result.change_output)
"""

from .engine import (
    ConfigEngine,
    analyze_config,
    generate_change_config,
    parse_config,
)
from .errors import ErrorKind, ValidationError
from .schema import (
    Block,
    Statement,
    Node,
    BaseInterface,
    SubInterface,
    BridgeDomain,
    BaseConfigModel,
    VlanAction,
    VlanOperation,
    VlanDatabaseEntry,
    InterfaceDirective,
    ChangeDirectiveSet,
    ChangePlan,
    LintFinding,
    RenderResult,
    AnalysisResult,
    ChangeResult,
)
from .parser import ConfigParser, normalize_indent
from .model import ModelExtractor
from .validator import DirectiveValidator, parse_vlan_list
from .diff import DiffEngine, summarize_plan
from .generator import CommandGenerator
from .renderer import ConfigRenderer

__all__ = [
    # Main engine
    "ConfigEngine",
    "parse_config",
    "analyze_config",
    "generate_change_config",
    # Errors
    "ErrorKind",
    "ValidationError",
    # Schema classes
    "Block",
    "Statement",
    "Node",
    "BaseInterface",
    "SubInterface",
    "BridgeDomain",
    "BaseConfigModel",
    "VlanAction",
    "VlanOperation",
    "VlanDatabaseEntry",
    "InterfaceDirective",
    "ChangeDirectiveSet",
    "ChangePlan",
    "LintFinding",
    "RenderResult",
    "AnalysisResult",
    "ChangeResult",
    # Components (for advanced use)
    "ConfigParser",
    "normalize_indent",
    "ModelExtractor",
    "DirectiveValidator",
    "parse_vlan_list",
    "DiffEngine",
    "summarize_plan",
    "CommandGenerator",
    "ConfigRenderer",
]
