"""CapabilityRegistry — tools, resources, and prompts keyed for lookup.

The registry is filled at startup and then frozen; the dispatcher only ever
reads from a frozen registry, so lookups need no locking.

Resource resolution order:
1. Exact (non-templated) URI — direct dict lookup.
2. Templates — scanned in registration order, first structural match wins.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from mcpkit.core.descriptors import PromptDescriptor, ResourceDescriptor, ToolDescriptor
from mcpkit.core.errors import DuplicateRegistrationError, RegistryFrozenError

logger = logging.getLogger(__name__)


class ResourceMatch(NamedTuple):
    """A resolved resource and the parameters extracted from its URI."""

    descriptor: ResourceDescriptor
    params: dict[str, str]


class CapabilityRegistry:
    """Holds the three capability maps of one server."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._prompts: dict[str, PromptDescriptor] = {}
        self._exact_resources: dict[str, ResourceDescriptor] = {}
        self._templates: list[ResourceDescriptor] = []
        self._template_patterns: set[str] = set()
        self._frozen = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_tool(self, descriptor: ToolDescriptor) -> None:
        self._check_open("tool", descriptor.name)
        if descriptor.name in self._tools:
            raise DuplicateRegistrationError("tool", descriptor.name)
        self._tools[descriptor.name] = descriptor
        logger.debug("Registered tool %s (%s)", descriptor.name, descriptor.kind.value)

    def register_resource(self, descriptor: ResourceDescriptor) -> None:
        pattern = descriptor.uri_pattern
        self._check_open("resource", pattern)
        if pattern in self._exact_resources or pattern in self._template_patterns:
            raise DuplicateRegistrationError("resource", pattern)
        if descriptor.is_template:
            self._templates.append(descriptor)
            self._template_patterns.add(pattern)
        else:
            self._exact_resources[pattern] = descriptor
        logger.debug("Registered resource %s", pattern)

    def register_prompt(self, descriptor: PromptDescriptor) -> None:
        self._check_open("prompt", descriptor.name)
        if descriptor.name in self._prompts:
            raise DuplicateRegistrationError("prompt", descriptor.name)
        self._prompts[descriptor.name] = descriptor
        logger.debug("Registered prompt %s", descriptor.name)

    def freeze(self) -> None:
        """Reject any further registration."""
        if not self._frozen:
            self._frozen = True
            logger.info(
                "Registry frozen: %d tool(s), %d resource(s), %d template(s), %d prompt(s)",
                len(self._tools),
                len(self._exact_resources),
                len(self._templates),
                len(self._prompts),
            )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self, kind: str, key: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(kind, key)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_tool(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def find_prompt(self, name: str) -> PromptDescriptor | None:
        return self._prompts.get(name)

    def match_resource(self, uri: str) -> ResourceMatch | None:
        """Resolve *uri* to a resource, exact entries first."""
        exact = self._exact_resources.get(uri)
        if exact is not None:
            return ResourceMatch(exact, {})

        for descriptor in self._templates:
            params = descriptor.template.match(uri)
            if params is not None:
                return ResourceMatch(descriptor, params)
        return None

    # ------------------------------------------------------------------
    # Listing (registration order)
    # ------------------------------------------------------------------

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def list_resources(self) -> list[ResourceDescriptor]:
        return list(self._exact_resources.values())

    def list_resource_templates(self) -> list[ResourceDescriptor]:
        return list(self._templates)

    def list_prompts(self) -> list[PromptDescriptor]:
        return list(self._prompts.values())

    def __repr__(self) -> str:
        return (
            f"CapabilityRegistry(tools={len(self._tools)}, "
            f"resources={len(self._exact_resources)}, "
            f"templates={len(self._templates)}, "
            f"prompts={len(self._prompts)}, frozen={self._frozen})"
        )
