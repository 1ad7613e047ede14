# tests/test_main.py

import json
import sys

import pytest

from rbstraverse import main as cli
from rbstraverse.config import load_config
from rbstraverse.main import discover_ruby_files, generate_signatures, show_signature

SIGNATURE = """
class Integer
end

class String
  def size: () -> Integer
end
"""

FILES = {
    "app/models/application_record.rb": "class ApplicationRecord\nend\n",
    "app/models/concerns/searchable.rb": (
        "module Searchable\n"
        "  extend ActiveSupport::Concern\n"
        "\n"
        "  class_methods do\n"
        "    def search(term); end\n"
        "  end\n"
        "end\n"
    ),
    "app/models/user.rb": (
        "class User < ApplicationRecord\n"
        "  include Searchable\n"
        "  delegate :size, to: :name\n"
        "end\n"
    ),
    "app/models/plain.rb": "class Plain\n  def hello; end\nend\n",
    "lib/broken.rb": "class Unknown::Thing\n  delegate :a, to: :b\nend\n",
    "lib/tasks/ignored.rb": "class Ignored\n  cattr_reader :x\nend\n",
    "tmp/cache.rb": "class Cached\n  cattr_reader :x\nend\n",
}


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.delenv("RBSTRAVERSE_SIGNATURE_PATHS", raising=False)
    monkeypatch.delenv("RBSTRAVERSE_OUTPUT_DIR", raising=False)
    for rel, text in FILES.items():
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    (tmp_path / "sig").mkdir()
    (tmp_path / "sig" / "core.rbs").write_text(SIGNATURE)
    (tmp_path / "sig" / "user.rbs").write_text("class User\n  def name: () -> String\nend\n")
    (tmp_path / ".gitignore").write_text("tmp/\n")
    (tmp_path / ".rbstraverse.toml").write_text('[rbstraverse]\nsource_dirs = ["app", "lib", "tmp"]\nexclude = ["lib/tasks/"]\n')
    return tmp_path


def test_discover_ruby_files(project):
    files = discover_ruby_files(load_config(str(project)))
    rel = sorted(str(f.relative_to(project)) for f in files)
    assert rel == [
        "app/models/application_record.rb",
        "app/models/concerns/searchable.rb",
        "app/models/plain.rb",
        "app/models/user.rb",
        "lib/broken.rb",
    ]


def test_generate_signatures(project, capsys):
    summary = generate_signatures(str(project), quiet=True, max_workers=2)
    assert summary == {"processed": 5, "written": 1, "skipped": 3, "failed": 1}

    out_dir = project / "sig" / "activesupport"
    written = sorted(str(p.relative_to(out_dir)) for p in out_dir.rglob("*.rbs"))
    assert written == ["app/models/user.rbs"]
    assert (out_dir / "app" / "models" / "user.rbs").read_text() == (
        "# resolve-type-names: false\n"
        "\n"
        "class ::User < ::ApplicationRecord\n"
        "  include ::Searchable\n"
        "  extend ::Searchable::ClassMethods\n"
        "\n"
        "  def size: () -> ::Integer\n"
        "end\n"
    )
    assert "Unable to process" in capsys.readouterr().err


def test_regeneration_ignores_previous_output(project):
    generate_signatures(str(project), quiet=True)
    stale = project / "sig" / "activesupport" / "stale.rbs"
    stale.write_text("class User\n  def size: () -> bool\nend\n")

    generate_signatures(str(project), quiet=True)
    assert not stale.exists()
    text = (project / "sig" / "activesupport" / "app" / "models" / "user.rbs").read_text()
    assert "def size: () -> ::Integer" in text


def test_no_clear_keeps_existing_output(project):
    out_dir = project / "sig" / "activesupport"
    out_dir.mkdir(parents=True)
    (out_dir / "keep.rbs").write_text("")
    generate_signatures(str(project), quiet=True, clear_existing=False)
    assert (out_dir / "keep.rbs").exists()


def test_dump_macros(project):
    macro_dir = project / "macros"
    generate_signatures(str(project), quiet=True, macro_dir=str(macro_dir))
    calls = json.loads((macro_dir / "app" / "models" / "user.json").read_text())
    assert [c["kind"] for c in calls] == ["include", "delegate"]


def test_missing_root_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        generate_signatures(str(tmp_path / "missing"))


def test_show_signature(project):
    # only the shown file is indexed, so the superclass stays unresolved
    rbs = show_signature(str(project / "app" / "models" / "user.rb"), root_dir=str(project))
    assert rbs.startswith("# resolve-type-names: false\n\nclass ::User < ::ApplicationRecord\n")
    assert "  def size: () -> ::Integer\n" in rbs


def test_cli_generate(project, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["rbstraverse", "generate", str(project), "--output_dir", "out"])
    cli.main()
    assert (project / "out" / "app" / "models" / "user.rbs").exists()
    assert "Done! 1 RBS files written to" in capsys.readouterr().out


def test_cli_reports_bad_configuration(project, monkeypatch, capsys):
    (project / ".rbstraverse.toml").write_text("bogus = true\n")
    monkeypatch.setattr(sys, "argv", ["rbstraverse", "generate", str(project)])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1
    assert "Unknown configuration keys" in capsys.readouterr().err
