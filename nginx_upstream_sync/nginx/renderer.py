"""Renders the nginx upstream configuration from a Jinja2 template."""

from __future__ import annotations

import logging
from pathlib import Path

import jinja2

from ..discovery.models import HostSet
from ..exceptions import TemplateError

logger = logging.getLogger(__name__)

# Host set used to trial-render the template before the loop starts
_VALIDATION_HOSTS = HostSet.of(["127.0.0.1"])


class ConfigRenderer:
    """Pure function of (host set, port) to config text, for one fixed template.

    The template sees two names: ``hosts`` (addresses in lexicographic order)
    and ``port``. Any other reference is an error rather than an empty string.
    """

    def __init__(self, source: str, name: str = "<template>"):
        self._name = name
        env = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )
        try:
            self._template = env.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(f"Could not parse template {name} (line {exc.lineno}): {exc.message}") from exc

    @classmethod
    def from_file(cls, path: str | Path) -> ConfigRenderer:
        path = Path(path)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TemplateError(f"Could not load nginx template file {path}: {exc}") from exc
        return cls(source, name=str(path))

    def validate(self, port: int) -> None:
        """Trial-render with a placeholder host so bad references fail at startup."""
        self.render(_VALIDATION_HOSTS, port)
        logger.debug("Template %s validated", self._name)

    def render(self, host_set: HostSet, port: int) -> str:
        try:
            return self._template.render(hosts=host_set.ordered(), port=port)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Could not render template {self._name}: {exc}") from exc
        # Filters and arithmetic inside the template raise plain Python errors
        except (ArithmeticError, TypeError, ValueError) as exc:
            raise TemplateError(
                f"Could not render template {self._name}: {type(exc).__name__}: {exc}"
            ) from exc
