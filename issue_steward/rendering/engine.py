"""Sandboxed Jinja2 rendering of tracker-facing markdown.

Tracking issue bodies and bot comments are rendered from package templates
so that every string the tracker will later be searched for lives in one
place next to the constants in ``issue_steward.engine.protocol``.

Draft titles and generator output are user- or model-authored text that
ends up inside templates, so rendering runs in Jinja2's
``SandboxedEnvironment`` with ``StrictUndefined``.

Example:
    >>> engine = MarkdownTemplateEngine()
    >>> body = engine.render("sub_issue_reference.md.j2", {"draft_title": "Fix CI", "number": 7})
"""

from pathlib import Path
from typing import Any, cast

from jinja2 import FileSystemLoader, StrictUndefined, TemplateNotFound
from jinja2.sandbox import SandboxedEnvironment

TEMPLATE_DIR = Path(__file__).parent / "templates"


class MarkdownTemplateEngine:
    """Sandboxed Jinja2 environment over the package's markdown templates.

    Configuration:
        - Autoescape disabled (markdown, not HTML)
        - trim_blocks/lstrip_blocks so loop tags leave no blank lines
        - keep_trailing_newline preserves the template's final newline

    Attributes:
        template_dir: Resolved path to the template directory.
        env: The SandboxedEnvironment instance.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize the engine.

        Args:
            template_dir: Root directory for templates. Defaults to the
                package's built-in templates.

        Raises:
            ValueError: If template_dir doesn't exist or isn't a directory.
        """
        self.template_dir = (template_dir or TEMPLATE_DIR).resolve()

        if not self.template_dir.is_dir():
            raise ValueError(f"Template directory does not exist: {self.template_dir}")

        self.env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def validate_template_path(self, template_path: str) -> Path:
        """Resolve ``template_path`` and refuse anything outside template_dir.

        Raises:
            ValueError: If path escapes the template directory.
            TemplateNotFound: If the template file doesn't exist.
        """
        requested_path = (self.template_dir / template_path).resolve()

        try:
            requested_path.relative_to(self.template_dir)
        except ValueError as e:
            raise ValueError(f"Template path escapes template directory: {template_path}") from e

        if not requested_path.exists():
            raise TemplateNotFound(template_path)

        return requested_path

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a template with the given context.

        Raises:
            TemplateNotFound: If template doesn't exist.
            jinja2.UndefinedError: If the template uses a variable missing
                from ``context``.
        """
        self.validate_template_path(template_path)
        template = self.env.get_template(template_path)
        return cast(str, template.render(**context))
