# rbstraverse/generator.py

import sys
import traceback

from rbstraverse.base.source_extractor import read_source
from rbstraverse.builder.declaration_builder import DeclarationBuilder
from rbstraverse.builder.namespace_formatter import NamespaceFormatter
from rbstraverse.extractors.ruby_macro_extractor import RubyMacroExtractor
from rbstraverse.resolvers.method_resolver import MethodTypeResolver
from rbstraverse.resolvers.mixin_resolver import MixinResolver
from rbstraverse.utils.rbs_writer import RbsWriter


def generate(file_path: str, env):
    """RBS for the macros in `file_path`, or None (failures are reported, not raised)."""
    try:
        return Generator(env).generate(file_path)
    except Exception:
        print(traceback.format_exc(), file=sys.stderr)
        print(f"Failed to generate RBS for {file_path}", file=sys.stderr)
        return None


class Generator:
    def __init__(self, env):
        self.env = env
        self.declaration_builder = DeclarationBuilder(MethodTypeResolver(env), MixinResolver(env))
        self.formatter = NamespaceFormatter(env)
        self.writer = RbsWriter()

    def generate(self, file_path: str):
        return self.generate_source(read_source(file_path), file_path)

    def generate_source(self, source: bytes, file_path: str = "<memory>"):
        method_calls = self.parse_source_code(source, file_path)
        if not method_calls:
            return None

        blocks = []
        for namespace, calls in method_calls.items():
            public_decls, private_decls = self.declaration_builder.build(namespace, calls)
            if not public_decls and not private_decls:
                continue
            blocks.append(self.formatter.format(namespace, public_decls, private_decls))

        if not blocks:
            return None
        return self.writer.write("\n".join(blocks))

    def parse_source_code(self, source: bytes, file_path: str):
        extractor = RubyMacroExtractor()
        return extractor.process_source(source, file_path)
