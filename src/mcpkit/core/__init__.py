"""Capability core — schemas, registry, handler execution, and conversations."""

from mcpkit.core.content import (
    AudioContent,
    CallToolResult,
    ContentItem,
    ImageContent,
    PromptMessage,
    TextContent,
)
from mcpkit.core.context import RequestScope, ToolContext, current_scope, request_scope
from mcpkit.core.conversation import Conversation, Speaker, coerce_prompt_output, conversation
from mcpkit.core.descriptors import HandlerKind, PromptDescriptor, ResourceDescriptor, ToolDescriptor
from mcpkit.core.errors import (
    ArgumentValidationError,
    DuplicateRegistrationError,
    McpKitError,
    ProgressOrderError,
    RegistryFrozenError,
    SamplingUnavailableError,
)
from mcpkit.core.execution import ExecutionEngine, coerce_result
from mcpkit.core.progress import Finished, Progress, StepIterator, create_progress
from mcpkit.core.registry import CapabilityRegistry, ResourceMatch
from mcpkit.core.sampling import ClientChannel, Sampling
from mcpkit.core.schema import SchemaDescriptor, SchemaType, T, build_input_schema, validate_arguments
from mcpkit.core.uri_template import UriTemplate

__all__ = [
    "ArgumentValidationError",
    "AudioContent",
    "CallToolResult",
    "CapabilityRegistry",
    "ClientChannel",
    "ContentItem",
    "Conversation",
    "DuplicateRegistrationError",
    "ExecutionEngine",
    "Finished",
    "HandlerKind",
    "ImageContent",
    "McpKitError",
    "Progress",
    "ProgressOrderError",
    "PromptDescriptor",
    "PromptMessage",
    "RegistryFrozenError",
    "RequestScope",
    "ResourceDescriptor",
    "ResourceMatch",
    "Sampling",
    "SamplingUnavailableError",
    "SchemaDescriptor",
    "SchemaType",
    "Speaker",
    "StepIterator",
    "T",
    "TextContent",
    "ToolContext",
    "ToolDescriptor",
    "UriTemplate",
    "build_input_schema",
    "coerce_prompt_output",
    "coerce_result",
    "conversation",
    "create_progress",
    "current_scope",
    "request_scope",
    "validate_arguments",
]
