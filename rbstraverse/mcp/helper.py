import os
import sys
import tomllib
import traceback
from functools import wraps
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

TOOL_DESCRIPTIONS = os.path.join(os.path.dirname(os.path.abspath(__file__)), "tool_descriptions.toml")

with open(TOOL_DESCRIPTIONS, "rb") as f:
    parsed_data = tomllib.load(f)


def describe_parameters(func, tool_data: dict):
    """Attach the per-parameter descriptions of a tool entry to `func`'s annotations."""
    annotations = dict(func.__annotations__)
    for param, text in tool_data.items():
        if param == "description":
            continue
        base = annotations.get(param, str)
        annotations[param] = Annotated[base, Field(description=text.strip())]
    func.__annotations__ = annotations
    return func


def auto_mcp_tool(mcp: FastMCP, tool_key: str):
    def decorator(func):
        tool_data = parsed_data[tool_key]
        describe_parameters(func, tool_data)
        return mcp.tool(name=tool_key, description=tool_data["description"].strip())(func)

    return decorator


def safe_error(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            print(traceback.format_exc(), file=sys.stderr)
            return {"status": "failure", "error": type(e).__name__, "message": str(e)}

    return wrapper


def split_paths(value: str):
    """Comma separated tool argument -> list of paths, or None when blank."""
    if not value:
        return None
    return [p.strip() for p in value.split(",") if p.strip()] or None
