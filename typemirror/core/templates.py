"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for code generation.
"""

from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError as JinjaError


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self):
        """Initialize an engine holding in-memory templates only."""
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        # Generated declarations are not markup, nothing is escaped
        self._env = Environment(
            loader=DictLoader({}),
            autoescape=False,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

        # Add custom filters for code generation
        self._env.filters["indent_lines"] = self._indent_filter
        self._env.filters["doc_comment"] = self._doc_comment_filter

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except JinjaError as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except JinjaError as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._env.loader.mapping[name] = content

    def template_exists(self, template_name: str) -> bool:
        """Check if a template can be loaded."""
        return template_name in self._env.loader.list_templates()

    # Template filters for code generation

    def _indent_filter(self, value: str, prefix: str = "    ") -> str:
        """Prefix every non-blank line of a string."""
        lines = str(value).split("\n")
        return "\n".join(prefix + line if line.strip() else line for line in lines)

    def _doc_comment_filter(self, value: str, indent: str = "") -> str:
        """Render text as a ``/** ... */`` block at the given indentation."""
        lines = [line.rstrip() for line in str(value).strip().split("\n")]
        if len(lines) == 1:
            return f"{indent}/** {lines[0]} */"

        body = "\n".join(f"{indent} * {line}" if line else f"{indent} *" for line in lines)
        return f"{indent}/**\n{body}\n{indent} */"


def create_template_engine() -> TemplateEngine:
    """Create a template engine for in-memory templates."""
    return TemplateEngine()
