"""Render templates stored under ``settings.templates`` of the report store."""

from __future__ import annotations

import logging

from dailyreport.exceptions import TemplateNotFoundError
from dailyreport.models import Template
from dailyreport.store import ReportStore


class TemplateStore:
    """Named templates with at most one marked as default."""

    def __init__(self, store: ReportStore) -> None:
        self.store = store
        self.logger = logging.getLogger(__name__)

    def list(self) -> list[Template]:
        return [Template.from_dict(t) for t in self.store.get_settings()["templates"]]

    def find_by_name(self, name: str) -> Template | None:
        """First template called ``name``, if any."""
        return next((t for t in self.list() if t.name == name), None)

    def find_by_id(self, template_id: str) -> Template | None:
        return next((t for t in self.list() if t.id == template_id), None)

    def find_default(self) -> Template | None:
        return next((t for t in self.list() if t.is_default), None)

    def save(self, template: Template) -> None:
        """Upsert by id.

        Saving a default template clears ``isDefault`` on every other template
        in the same write.
        """
        data = self.store.read_document()
        templates = data["settings"]["templates"]

        if template.is_default:
            for record in templates:
                if record.get("id") != template.id and record.get("isDefault"):
                    self.logger.debug("Clearing default flag on template %s", record.get("name"))
                    record["isDefault"] = False

        record = template.to_dict()
        for i, existing in enumerate(templates):
            if existing.get("id") == template.id:
                templates[i] = record
                break
        else:
            templates.append(record)

        self.store.write_document(data)

    def set_default(self, name: str) -> Template:
        template = self.find_by_name(name)
        if template is None:
            raise TemplateNotFoundError(f"Template not found: {name}", name=name)
        template.is_default = True
        self.save(template)
        return template

    def delete(self, template_id: str) -> bool:
        data = self.store.read_document()
        templates = data["settings"]["templates"]
        remaining = [t for t in templates if t.get("id") != template_id]
        if len(remaining) == len(templates):
            return False
        data["settings"]["templates"] = remaining
        self.store.write_document(data)
        return True
