import json
import os
from abc import ABC, abstractmethod

import chardet
from tree_sitter_language_pack import get_parser


def read_source(file_path: str) -> bytes:
    """Read a source file and normalise it to utf-8 bytes."""
    with open(file_path, "rb") as f:
        raw = f.read()
    try:
        raw.decode("utf-8")
        return raw
    except UnicodeDecodeError:
        pass
    guess = chardet.detect(raw)
    encoding = guess["encoding"] or "utf-8"
    return raw.decode(encoding, errors="replace").encode("utf-8")


class SourceExtractor(ABC):
    language = "ruby"

    def __init__(self):
        self.parser = get_parser(self.language)

    def parse(self, source):
        if isinstance(source, str):
            source = source.encode("utf8")
        return self.parser.parse(source)

    def process_file(self, file_path: str):
        return self.process_source(read_source(file_path), file_path)

    @abstractmethod
    def process_source(self, source: bytes, file_path: str = "<memory>"):
        pass

    @abstractmethod
    def extract_all_components(self):
        pass

    def write_to_file(self, output_path: str):
        dirname = os.path.dirname(output_path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with open(output_path, "w", encoding="utf8") as f:
            json.dump(self.extract_all_components(), f, indent=2, ensure_ascii=False)
