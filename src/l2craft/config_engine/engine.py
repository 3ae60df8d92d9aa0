"""Main Config Engine - orchestrates the parse, analyze and change workflows.

Provides a single entry point for:
1. Parsing configuration text into a node tree
2. Analyzing a base config (bridge-domains, simplified view, lint)
3. Validating a change input against a base config
4. Calculating the change plan
5. Generating the change commands
"""
import logging
from typing import Optional

from ..config.settings import EngineSettings
from ..utils.logging_config import timed, timed_section_sync
from .diff import DiffEngine, summarize_plan
from .errors import ValidationError
from .generator import CommandGenerator
from .model import ModelExtractor
from .parser import ConfigParser, normalize_indent
from .renderer import ConfigRenderer
from .schema import (
    AnalysisResult,
    BaseConfigModel,
    ChangePlan,
    ChangeResult,
    Node,
)
from .validator import DirectiveValidator

logger = logging.getLogger(__name__)


class ConfigEngine:
    """
    Main Config Engine for analyzing configs and generating change commands.

    Usage:
        engine = ConfigEngine()
        analysis = engine.analyze_config(base_text)
        result = engine.generate_change_config(base_text, change_text)
        print(result.change_output)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize the Config Engine.

        Args:
            settings: Engine settings (defaults if omitted)
        """
        self.settings = settings or EngineSettings()
        self.parser = ConfigParser(max_depth=self.settings.max_nesting_depth)
        self.extractor = ModelExtractor()
        self.validator = DirectiveValidator()
        self.diff_engine = DiffEngine()
        self.generator = CommandGenerator()
        self.renderer = ConfigRenderer()

    @timed("parse")
    def parse_config(self, text: str) -> tuple[Node, ...]:
        """Parse configuration text into top-level nodes. Never raises."""
        return self.parser.parse(text)

    def extract(self, text: str) -> BaseConfigModel:
        """Parse and extract the model of a base config."""
        return self.extractor.extract(self.parser.parse(text))

    @timed("analyze")
    def analyze_config(self, text: str) -> AnalysisResult:
        """
        Analyze a base configuration.

        Args:
            text: Base configuration text

        Returns:
            AnalysisResult with bridge-domains, lint and simplified view
        """
        with timed_section_sync("extract", subject="base"):
            base = self.extract(text)

        with timed_section_sync("render", subject="base"):
            rendered = self.renderer.render(base)

        if rendered.findings:
            logger.info(f"Lint reported {len(rendered.findings)} findings")

        return AnalysisResult(
            domains=list(base.bridge_domains),
            lint_output=rendered.lint_output,
            simplified_config=rendered.simplified_config,
            findings=rendered.findings,
        )

    def plan(self, base_text: str, change_text: str) -> ChangePlan:
        """
        Validate a change input and calculate its change plan.

        Raises:
            ValidationError: First violation in the change input
        """
        with timed_section_sync("extract", subject="base"):
            base = self.extract(base_text)

        with timed_section_sync("validate", subject="change"):
            change_tree = self.parser.parse(normalize_indent(change_text))
            directives = self.validator.interpret(change_tree, base)

        with timed_section_sync("diff", subject="change"):
            plan = self.diff_engine.calculate(base, directives)

        logger.info(f"Change plan has {plan.total_changes} changes")
        return plan

    @timed("change")
    def generate_change_config(self, base_text: str, change_text: str) -> ChangeResult:
        """
        Generate the commands that apply a change input to a base config.

        Args:
            base_text: Base configuration text
            change_text: Change input text

        Returns:
            ChangeResult with change_output (empty when nothing changes)

        Raises:
            ValidationError: First violation in the change input
        """
        plan = self.plan(base_text, change_text)

        if plan.no_change:
            logger.info("No changes needed - base config already matches change input")
            return ChangeResult(success=True, change_output="")

        with timed_section_sync("generate", subject="change"):
            output = self.generator.generate(plan)

        return ChangeResult(success=True, change_output=output)

    def apply(self, base_text: str, change_text: str) -> ChangeResult:
        """
        Like generate_change_config, but reports validation errors in the result.

        Hosts use this to show errors as text instead of handling exceptions.
        """
        try:
            return self.generate_change_config(base_text, change_text)
        except ValidationError as e:
            logger.info(f"Change input rejected: {e}")
            return ChangeResult(
                success=False,
                error=str(e),
                error_kind=e.kind.value,
                error_line=e.line,
            )

    def preview(self, base_text: str, change_text: str) -> str:
        """
        Preview changes without generating commands.

        Returns human-readable plan summary, or the validation error.
        """
        try:
            plan = self.plan(base_text, change_text)
        except ValidationError as e:
            return f"Validation failed:\n{e}"
        return summarize_plan(plan)


_default_engine: Optional[ConfigEngine] = None


def get_engine() -> ConfigEngine:
    """Shared engine with default settings."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ConfigEngine()
    return _default_engine


def parse_config(text: str) -> tuple[Node, ...]:
    """Parse configuration text with the default engine."""
    return get_engine().parse_config(text)


def analyze_config(text: str) -> AnalysisResult:
    """Analyze a base configuration with the default engine."""
    return get_engine().analyze_config(text)


def generate_change_config(base_text: str, change_text: str) -> ChangeResult:
    """Generate change commands with the default engine. Raises ValidationError."""
    return get_engine().generate_change_config(base_text, change_text)
