import argparse
import os
import shutil
import sys
import traceback
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pathspec
from tqdm import tqdm

from rbstraverse.config import load_config
from rbstraverse.environment.signature_loader import SignatureLoader
from rbstraverse.environment.type_environment import TypeEnvironment
from rbstraverse.extractors.ruby_definition_extractor import RubyDefinitionExtractor
from rbstraverse.extractors.ruby_macro_extractor import RubyMacroExtractor
from rbstraverse.generator import Generator, generate

RUBY_EXTS = (".rb",)


def discover_ruby_files(config):
    root_dir = Path(config["root_dir"])
    gitignore_pth = root_dir / ".gitignore"
    patterns = gitignore_pth.read_text().splitlines() if gitignore_pth.exists() else []
    spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns + list(config["exclude"]))

    found = []
    for source_dir in config["source_dirs"]:
        source_dir = Path(source_dir)
        if source_dir.is_file():
            candidates = [source_dir]
        elif source_dir.is_dir():
            candidates = sorted(source_dir.rglob("*"))
        else:
            continue
        for file_path in candidates:
            if file_path.suffix not in RUBY_EXTS or not file_path.is_file():
                continue
            try:
                rel = file_path.relative_to(root_dir)
            except ValueError:
                rel = file_path
            if not spec.match_file(str(rel)) and file_path not in found:
                found.append(file_path)
    return found


def build_environment(config, ruby_files, quiet: bool = False):
    env = TypeEnvironment()
    loader = SignatureLoader(env)
    for sig_path in config["signature_paths"]:
        if not os.path.exists(sig_path):
            if not quiet:
                print(f"Signature path not found - {sig_path}. Skipping it.")
            continue
        try:
            if os.path.isdir(sig_path):
                loader.load_directory(sig_path, exclude=[config["output_dir"]])
            else:
                loader.load_path(sig_path)
        except Exception:
            print(traceback.format_exc(), file=sys.stderr)
            print(f"Unable to load signatures - {sig_path}. Skipping it.", file=sys.stderr)

    indexer = RubyDefinitionExtractor(env)
    for code_path in tqdm(ruby_files, total=len(ruby_files), desc="Indexing Ruby sources", disable=quiet):
        try:
            indexer.process_file(str(code_path))
        except Exception:
            print(traceback.format_exc(), file=sys.stderr)
            print(f"Unable to index - {code_path}. Skipping it.", file=sys.stderr)

    env.resolve_type_names()
    return env


def _process_single_file_worker(args):
    code_path, env, root_dir, output_dir, macro_dir = args
    try:
        rel_path = os.path.relpath(code_path, root_dir)
        if macro_dir:
            extractor = RubyMacroExtractor()
            extractor.process_file(str(code_path))
            extractor.write_to_file(os.path.join(macro_dir, os.path.splitext(rel_path)[0] + ".json"))

        rbs = Generator(env).generate(str(code_path))
        if rbs is None:
            return "skipped"

        out_path = os.path.join(output_dir, os.path.splitext(rel_path)[0] + ".rbs")
        os.makedirs(os.path.dirname(out_path), exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(rbs)
        return "written"
    except Exception:
        print(traceback.format_exc(), file=sys.stderr)
        print(f"Unable to process - {code_path}. Skipping it.", file=sys.stderr)
        return "failed"


def generate_signatures(root_dir, output_dir=None, signature_paths=None, clear_existing: bool = True,
                        quiet: bool = False, macro_dir=None, max_workers=None):
    if not os.path.isdir(root_dir):
        raise FileNotFoundError(f"Root directory not found: {root_dir}")

    config = load_config(root_dir, {
        "output_dir": output_dir,
        "signature_paths": signature_paths,
        "max_workers": max_workers,
    })
    output_dir = config["output_dir"]

    if os.path.isdir(output_dir) and clear_existing:
        shutil.rmtree(output_dir, ignore_errors=True)
    os.makedirs(output_dir, exist_ok=True)

    ruby_files = discover_ruby_files(config)
    env = build_environment(config, ruby_files, quiet=quiet)

    workers = config["max_workers"] or min(32, (os.cpu_count() or 1) + 4)
    tasks_args = [(code_path, env, config["root_dir"], output_dir, macro_dir) for code_path in ruby_files]
    summary = {"processed": len(ruby_files), "written": 0, "skipped": 0, "failed": 0}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = executor.map(_process_single_file_worker, tasks_args)
        for status in tqdm(results, total=len(tasks_args), desc="Generating RBS", disable=quiet):
            summary[status] += 1

    if not quiet:
        print(f"Done! {summary['written']} RBS files written to: {output_dir}")
        if summary["failed"]:
            print(f"Failed to process {summary['failed']} files.")
    return summary


def show_signature(file_path, signature_paths=None, root_dir=None):
    root_dir = root_dir or os.path.dirname(os.path.abspath(file_path))
    config = load_config(root_dir, {"signature_paths": signature_paths})
    env = build_environment(config, [Path(file_path)], quiet=True)
    return generate(file_path, env)


def main():
    parser = argparse.ArgumentParser(description="Generate RBS for ActiveSupport macros")
    subparsers = parser.add_subparsers(dest="function", help="Available functions")

    parser_generate = subparsers.add_parser("generate", help="Generate RBS files for a Ruby project")
    parser_generate.add_argument("root_dir", help="Root directory of the Ruby project")
    parser_generate.add_argument("--output_dir", default=None,
                                 help="Output directory (default: sig/activesupport)")
    parser_generate.add_argument("--sig", action="append", default=None, dest="signature_paths",
                                 help="RBS signature file or directory to load (repeatable, default: sig)")
    parser_generate.add_argument("--no_clear", action="store_true",
                                 help="Do not clear the existing output directory")
    parser_generate.add_argument("--quiet", action="store_true", help="Only report failures")
    parser_generate.add_argument("--dump-macros", default=None, dest="macro_dir",
                                 help="Also write the extracted macro calls as JSON into this directory")
    parser_generate.add_argument("--max_workers", type=int, default=None,
                                 help="Number of worker threads")

    parser_show = subparsers.add_parser("show", help="Print the generated RBS for one Ruby file")
    parser_show.add_argument("file_path", help="Ruby source file")
    parser_show.add_argument("--root_dir", default=None, help="Project root used for configuration")
    parser_show.add_argument("--sig", action="append", default=None, dest="signature_paths",
                             help="RBS signature file or directory to load (repeatable)")

    args = parser.parse_args()

    if not args.function:
        parser.print_help()
        return

    try:
        if args.function == "generate":
            generate_signatures(
                root_dir=args.root_dir,
                output_dir=args.output_dir,
                signature_paths=args.signature_paths,
                clear_existing=not args.no_clear,
                quiet=args.quiet,
                macro_dir=args.macro_dir,
                max_workers=args.max_workers,
            )
        elif args.function == "show":
            rbs = show_signature(args.file_path, args.signature_paths, args.root_dir)
            if rbs:
                print(rbs, end="")
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
