"""FastMCP server exposing the sourcing dialogue to other agents."""

from __future__ import annotations

from typing import Annotated

from fastmcp import Context, FastMCP

from workflows import (
    get_sourcing_history_tool,
    send_sourcing_message_tool,
)


server = FastMCP(
    name="sourcing-assistant",
    instructions=(
        "Expose tools that let an LLM hold a B2B sourcing-requirements conversation on behalf of a buyer "
        "and read back the collected dialogue."
    ),
)


@server.tool(
    description=(
        "Send one buyer message to a sourcing session. Returns the assistant turn: plain text, "
        "text with option pills, or a requirement summary card with Edit/Submit pills. "
        "To pick a pill, send its text as the message."
    ),
    tags=["sourcing"],
)
async def send_sourcing_message(
    message: Annotated[str, "The buyer's message (1-2000 characters)."],
    session_id: Annotated[
        str | None,
        "Conversation identifier. Defaults to 'default'.",
    ] = None,
    context: Context | None = None,
):
    return await send_sourcing_message_tool(
        session_id=session_id,
        message=message,
        context=context,
    )


@server.tool(
    description="Return every stored turn of a sourcing session, oldest first, including pill activity flags.",
    tags=["sourcing"],
)
async def get_sourcing_history(
    session_id: Annotated[
        str | None,
        "Conversation identifier. Defaults to 'default'.",
    ] = None,
    context: Context | None = None,
):
    return await get_sourcing_history_tool(session_id=session_id, context=context)


if __name__ == "__main__":
    server.run()
