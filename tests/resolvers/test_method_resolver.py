# tests/resolvers/test_method_resolver.py

import pytest

from rbstraverse.base.namespace import Namespace
from rbstraverse.environment.signature_loader import SignatureLoader
from rbstraverse.environment.type_environment import TypeEnvironment
from rbstraverse.resolvers.method_resolver import UNTYPED, MethodTypeResolver

SIGNATURE = """
class BasicObject
end

class Object < BasicObject
  def itself: () -> self
end

class Integer
  def succ: () -> Integer
end

class String
  def size: () -> Integer
  def to_sym: () -> Symbol
  def upcase: () -> String
            | (Symbol) -> String
  def slice: (Integer) -> String?
  def []: (Integer) -> String
        | (Range[Integer]) -> Array[String]
end

class Array[unchecked out Elem]
  def first: () -> Elem
  def size: () -> Integer
  def map: [U] () { (Elem) -> U } -> Array[U]
end

module Greeting
  def greet: () -> String
end

class Person
  include Greeting

  @nickname: String

  def name: () -> String
  def tags: () -> Array[String]
  def maybe_name: () -> String?
  def self.registry: () -> Integer
end

class Employee < Person
  def badge: () -> Integer
end
"""


@pytest.fixture(scope="module")
def env():
    env = TypeEnvironment()
    SignatureLoader(env).load_text(SIGNATURE)
    env.resolve_type_names()
    return env


@pytest.fixture(scope="module")
def resolver(env):
    return MethodTypeResolver(env)


PERSON = Namespace.parse("::Person")


def test_resolve_declared_method(resolver):
    assert resolver.resolve(PERSON, "name") == "::String"


def test_resolve_unknown_namespace_or_method(resolver):
    assert resolver.resolve(Namespace.parse("::Nobody"), "name") == UNTYPED
    assert resolver.resolve(PERSON, "unknown") == UNTYPED


def test_resolve_rejects_computed_names(resolver):
    assert resolver.resolve(PERSON, "#{name}") == UNTYPED
    assert resolver.resolve(PERSON, "") == UNTYPED


def test_resolve_through_superclass_and_module(resolver):
    employee = Namespace.parse("::Employee")
    assert resolver.resolve(employee, "name") == "::String"
    assert resolver.resolve(employee, "greet") == "::String"
    assert resolver.resolve(employee, "badge") == "::Integer"


def test_resolve_self_return_type(resolver):
    assert resolver.resolve(PERSON, "itself") == "::Object"


def test_overloads_with_same_return_type(resolver):
    assert resolver.resolve(Namespace.parse("::String"), "upcase") == "::String"


def test_overloads_with_different_return_types_are_untyped(resolver):
    assert resolver.resolve(Namespace.parse("::String"), "[]") == UNTYPED


def test_unknown_return_type_is_untyped(resolver):
    # Symbol is not declared
    assert resolver.resolve(Namespace.parse("::String"), "to_sym") == UNTYPED


def test_generic_return_types(resolver):
    array = Namespace.parse("::Array")
    assert resolver.resolve(array, "first") == UNTYPED
    assert resolver.resolve(array, "map") == UNTYPED
    assert resolver.resolve(array, "size") == "::Integer"


def test_singleton_method(resolver):
    assert resolver.resolve(PERSON, "registry", singleton=True) == "::Integer"
    assert resolver.resolve(PERSON, "registry") == UNTYPED


def test_delegate_to_method(resolver):
    assert resolver.resolve_delegate(PERSON, "name", "size") == "::Integer"
    assert resolver.resolve_delegate(PERSON, "tags", "size") == "::Integer"
    assert resolver.resolve_delegate(PERSON, "tags", "first") == UNTYPED


def test_delegate_to_instance_variable(resolver):
    assert resolver.resolve_delegate(PERSON, "@nickname", "upcase") == "::String"
    assert resolver.resolve_delegate(PERSON, "@missing", "upcase") == UNTYPED


def test_delegate_to_class(resolver):
    assert resolver.resolve_target(PERSON, "class") == "singleton(::Person)"
    assert resolver.resolve_delegate(PERSON, "class", "registry") == "::Integer"


def test_delegate_to_constant(resolver):
    employee = Namespace.parse("::Employee")
    assert resolver.resolve_delegate(employee, "Person", "registry") == "::Integer"
    assert resolver.resolve_delegate(employee, "Nobody", "registry") == UNTYPED


def test_delegate_through_unresolvable_hops(resolver):
    assert resolver.resolve_delegate(PERSON, "missing", "size") == UNTYPED
    assert resolver.resolve_delegate(PERSON, "maybe_name", "size") == UNTYPED
    assert resolver.resolve_delegate(Namespace.parse("::Nobody"), "name", "size") == UNTYPED


class BrokenEnvironment:
    def lookup_method(self, *args, **kwargs):
        raise RuntimeError("database unavailable")

    def has_type(self, name):
        raise RuntimeError("database unavailable")


def test_database_failures_degrade_to_untyped():
    resolver = MethodTypeResolver(BrokenEnvironment())
    assert resolver.resolve(PERSON, "name") == UNTYPED
    assert resolver.resolve_delegate(PERSON, "name", "size") == UNTYPED
    assert resolver.resolve_delegate(PERSON, "class", "size") == UNTYPED
