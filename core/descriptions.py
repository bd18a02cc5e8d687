from pathlib import Path
from typing import Any, Dict, Union

import jinja2
import yaml


class DescriptionCatalog:
    def __init__(self, file_path: Union[str, Path]) -> None:
        """Load tool and endpoint descriptions from a YAML file.

        Args:
            file_path: Path to the YAML file holding the descriptions

        Raises:
            FileNotFoundError: If the file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Description file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                self._data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {file_path}: {e}")

        self._template_cache: Dict[str, jinja2.Template] = {}

    def get(self, name: str) -> Any:
        """Look up an entry by dot-separated key, e.g. ``tools.search_file``.

        Raises:
            ValueError: If the key is not present
        """
        current = self._data
        try:
            for key in name.split("."):
                current = current[key]
        except (KeyError, TypeError):
            raise ValueError(f"Description '{name}' not found")
        return current

    def render(self, name: str, **values) -> str:
        """Render a description as a Jinja2 template.

        Raises:
            ValueError: If the key is missing or is not a string
            jinja2.TemplateError: If rendering fails
        """
        template_str = self.get(name)
        if not isinstance(template_str, str):
            raise ValueError(f"Description '{name}' is not a string")

        if template_str not in self._template_cache:
            self._template_cache[template_str] = jinja2.Template(
                template_str, undefined=jinja2.StrictUndefined
            )
        return self._template_cache[template_str].render(**values).strip()
