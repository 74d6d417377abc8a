"""Terminal report rendering using Jinja2 templates.

The default template lives at ``nodevuln/templates/verdict.txt.j2``.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .verdict import Verdict

_TEMPLATES_DIR = Path(__file__).parent / "templates"

SEPARATOR = "=" * 60


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(default_for_string=False, default=False),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_verdict(version: str, verdict: Verdict) -> str:
    """Render ``verdict`` as plain text for the terminal.

    Args:
        version: The checked version, as shown to the user.
        verdict: Outcome of the check.

    Returns:
        Rendered text ending with a newline.
    """
    template = _environment().get_template("verdict.txt.j2")
    return template.render(
        version=version,
        blocked=verdict.blocked,
        vulnerable=bool(verdict.findings),
        reasons=verdict.reasons,
        separator=SEPARATOR,
    )
