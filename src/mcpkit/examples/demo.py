"""Demo server exercising every capability shape.

Tools cover a string result, a JSON result with a domain failure, progress
steps, and optional sampling; resources cover an exact URI and a template;
prompts cover a single message and a multi-turn conversation.

Serve it with ``mcpkit serve`` (this module's ``server`` is the default app).
"""

from __future__ import annotations

from typing import Any

from mcpkit import T, conversation, create_progress, create_server, log
from mcpkit.config import env
from mcpkit.core.context import ToolContext

server = create_server(
    name="mcpkit-demo",
    version="0.1.0",
    instructions=(
        "An example MCP server showcasing all framework features. Use 'greet' for a hello, "
        "'calculate' for math, 'analyze' for progress-tracked analysis, and 'smart-answer' "
        "for LLM-assisted Q&A. Resources include docs://readme and user://{userId}. "
        "Prompts include 'code-review' and 'debug'."
    ),
)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@server.tool(
    "greet",
    description="Greets a person by name",
    input={"name": T.string(required=True, description="Name to greet")},
)
def greet(args: dict[str, Any]) -> str:
    name = args["name"].strip()
    greeting = env("GREETING", "Hello")
    log.info(f"Greeting {name}")
    return f"{greeting}, {name}!"


_OPERATIONS = {
    "add": lambda a, b: a + b,
    "subtract": lambda a, b: a - b,
    "multiply": lambda a, b: a * b,
    "divide": lambda a, b: a / b,
}


@server.tool(
    "calculate",
    description="Performs arithmetic operations",
    input={
        "operation": T.string(required=True, enum=list(_OPERATIONS)),
        "a": T.number(required=True, description="First operand"),
        "b": T.number(required=True, description="Second operand"),
    },
)
def calculate(args: dict[str, Any]) -> dict[str, Any]:
    operation, a, b = args["operation"], args["a"], args["b"]
    if operation == "divide" and b == 0:
        raise ValueError("Division by zero")
    result = _OPERATIONS[operation](a, b)
    if isinstance(result, float) and result.is_integer():
        result = int(result)
    return {"operation": operation, "a": a, "b": b, "result": result}


@server.tool(
    "analyze",
    description="Analyzes a topic with progress updates",
    input={"topic": T.string(required=True, description="Topic to analyze")},
)
def analyze(args: dict[str, Any]):
    step = create_progress(3)
    yield step()  # research
    yield step()  # analysis
    yield step()  # summary
    return f'Analysis of "{args["topic"]}" complete. Found 42 insights across 7 categories.'


@server.tool(
    "smart-answer",
    description="Answers questions, optionally asking the LLM for clarification",
    input={"question": T.string(required=True, description="Question to answer")},
)
async def smart_answer(args: dict[str, Any], ctx: ToolContext) -> str:
    question = args["question"]
    if not ctx.sampling:
        return f"Answer to: {question}"
    clarification = await ctx.sampling.ask("What additional context would help me answer this better?")
    return (
        f"Question: {question}\n"
        f"Context: {clarification}\n"
        "Answer: With the additional context, here is a comprehensive answer."
    )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


@server.resource("docs://readme", name="readme", description="Server documentation", mime_type="text/plain")
def readme() -> str:
    return (
        "Welcome to the example MCP server built with mcpkit. This server demonstrates "
        "tools, resources, prompts, progress tracking, and sampling."
    )


@server.resource("user://{userId}", name="user-profile", description="User profile by ID", mime_type="application/json")
def user_profile(params: dict[str, str]) -> dict[str, str]:
    user_id = params["userId"]
    return {"id": user_id, "name": f"User {user_id}", "joined": "2024-01-01", "plan": "pro"}


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@server.prompt(
    "code-review",
    description="Code review prompt",
    input={
        "code": T.string(required=True, description="Code to review"),
        "language": T.string(description="Programming language"),
    },
)
def code_review(args: dict[str, Any]) -> str:
    language = args.get("language") or ""
    return (
        f"Please review this {language or 'code'} for bugs, security issues, and improvements:"
        f"\n\n```{language}\n{args['code']}\n```"
    )


@server.prompt(
    "debug",
    description="Debug assistance prompt with structured dialogue",
    input={
        "error": T.string(required=True, description="Error message or description"),
        "context": T.string(description="Additional context, stack trace, or logs"),
    },
)
def debug(args: dict[str, Any]):
    context = args.get("context")
    return conversation(
        lambda user, ai: [
            user.say(f"I'm seeing this error: {args['error']}"),
            user.attach(context, "text/plain") if context else None,
            ai.say("I will analyze the error and provide step-by-step debugging guidance."),
        ]
    )
