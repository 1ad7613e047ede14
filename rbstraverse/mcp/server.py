from fastmcp import FastMCP

from rbstraverse.extractors.ruby_macro_extractor import RubyMacroExtractor
from rbstraverse.main import generate_signatures, show_signature
from rbstraverse.mcp.helper import auto_mcp_tool, parsed_data, safe_error, split_paths

mcp = FastMCP(
    "rbstraverse MCP", instructions=parsed_data["tool_description"]["instructions"]
)


@auto_mcp_tool(mcp, "generate_signatures")
@safe_error
def mcp_generate_signatures(
    root_dir: str,
    output_dir: str = "",
    signature_paths: str = "",
):
    summary = generate_signatures(
        root_dir,
        output_dir=output_dir or None,
        signature_paths=split_paths(signature_paths),
        quiet=True,
    )
    return {"status": "success", **summary}


@auto_mcp_tool(mcp, "inspect_macros")
@safe_error
def mcp_inspect_macros(file_path: str):
    extractor = RubyMacroExtractor()
    method_calls = extractor.process_file(file_path)
    return {
        namespace.name: [call.to_dict() for call in calls]
        for namespace, calls in method_calls.items()
    }


@auto_mcp_tool(mcp, "show_signature")
@safe_error
def mcp_show_signature(file_path: str, signature_paths: str = ""):
    rbs = show_signature(file_path, split_paths(signature_paths))
    if rbs is None:
        return {"status": "empty", "message": "No ActiveSupport macros produced declarations"}
    return {"status": "success", "rbs": rbs}


def main():
    # defaults to http://localhost:8000/sse
    mcp.run(transport="sse")


if __name__ == "__main__":
    main()
