import re, io
import logging
import yaml
from typing import Any

logger = logging.getLogger(__name__)

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*\n?", re.DOTALL)


class YamlFrontmatter:
    """Optional YAML header on exported and imported markdown pages."""

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        try:
            fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable front matter: %s", e)
            return {}, text
        if not isinstance(fm, dict):
            # a scalar or list is not front matter; keep the text untouched
            return {}, text
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n"
