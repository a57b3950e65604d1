"""Port definition for the remote template catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from scaffoldkit.domain.template import TemplateDescriptor


class TemplateRegistry(ABC):
    @abstractmethod
    def fetch_templates(self) -> list[TemplateDescriptor]:
        """Return every template published in the catalog."""
