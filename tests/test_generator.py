# tests/test_generator.py

import pytest

from rbstraverse.environment.signature_loader import SignatureLoader
from rbstraverse.environment.type_environment import TypeEnvironment
from rbstraverse.extractors.ruby_definition_extractor import RubyDefinitionExtractor
from rbstraverse.generator import Generator, generate

SIGNATURE = """
class Integer
end

class String
  def size: () -> Integer
end

class ApplicationRecord
end

class User < ApplicationRecord
  def name: () -> String
end
"""

SEARCHABLE = b"""
module Searchable
  extend ActiveSupport::Concern

  class_methods do
    def search(term); end
  end
end
"""

USER = b"""
class User < ApplicationRecord
  include Searchable
  delegate :size, to: :name
  class_attribute :roles, instance_predicate: false

  private

  cattr_reader :cache
end
"""

REPORT = b"""
module Admin
  class Report
    delegate :title, to: :document
  end
end
"""


@pytest.fixture(scope="module")
def env():
    env = TypeEnvironment()
    SignatureLoader(env).load_text(SIGNATURE)
    definitions = RubyDefinitionExtractor(env)
    for source in (SEARCHABLE, USER, REPORT):
        definitions.process_source(source)
    env.resolve_type_names()
    return env


@pytest.fixture(scope="module")
def generator(env):
    return Generator(env)


def test_generate_class_with_concern(generator):
    assert generator.generate_source(USER) == (
        "# resolve-type-names: false\n"
        "\n"
        "class ::User < ::ApplicationRecord\n"
        "  include ::Searchable\n"
        "  extend ::Searchable::ClassMethods\n"
        "\n"
        "  def size: () -> ::Integer\n"
        "\n"
        "  def self.roles: () -> untyped\n"
        "\n"
        "  def self.roles=: (untyped) -> untyped\n"
        "\n"
        "  def roles: () -> untyped\n"
        "\n"
        "  def roles=: (untyped) -> untyped\n"
        "\n"
        "  private\n"
        "\n"
        "  def self.cache: () -> untyped\n"
        "\n"
        "  def cache: () -> untyped\n"
        "end\n"
    )


def test_generate_nested_namespace(generator):
    assert generator.generate_source(REPORT) == (
        "# resolve-type-names: false\n"
        "\n"
        "module ::Admin\n"
        "  class ::Admin::Report < ::Object\n"
        "    def title: () -> untyped\n"
        "  end\n"
        "end\n"
    )


def test_several_namespaces_in_one_file(generator):
    source = USER + REPORT
    out = generator.generate_source(source)
    assert out.startswith("# resolve-type-names: false\n\nclass ::User")
    assert "end\n\nmodule ::Admin\n" in out


def test_no_macros_yields_nothing(generator):
    assert generator.generate_source(b"class User\n  def hello; end\nend\n") is None
    assert generator.generate_source(SEARCHABLE) is None


def test_only_unresolvable_includes_yield_nothing(generator, capsys):
    source = b"class User\n  include Missing\nend\n"
    assert generator.generate_source(source, "app/models/user.rb") is None
    err = capsys.readouterr().err
    assert "Unable to resolve module Missing included in ::User (app/models/user.rb:2)" in err


def test_unknown_namespace_fails_the_unit(env, tmp_path, capsys):
    path = tmp_path / "thing.rb"
    path.write_bytes(b"class Unknown::Thing\n  delegate :a, to: :b\nend\n")
    assert generate(str(path), env) is None
    err = capsys.readouterr().err
    assert "LookupError" in err
    assert f"Failed to generate RBS for {path}" in err


def test_generate_reads_files(env, tmp_path):
    path = tmp_path / "report.rb"
    path.write_bytes(REPORT)
    assert generate(str(path), env).endswith("    def title: () -> untyped\n  end\nend\n")


def test_syntax_error_fails_the_unit(env, tmp_path, capsys):
    path = tmp_path / "broken.rb"
    path.write_bytes(
        b"class Foo\n  cattr_reader :a\nend\n"
        b"class Bar\n  cattr_reader :b\n  def broken(\nend\n"
    )
    assert generate(str(path), env) is None
    err = capsys.readouterr().err
    assert f"Syntax error in {path}" in err
    assert f"Failed to generate RBS for {path}" in err
