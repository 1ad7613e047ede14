from rbstraverse.base.macro_call import MacroKind

MACRO_KINDS = {
    "delegate": MacroKind.DELEGATE,
    "class_attribute": MacroKind.CLASS_ATTRIBUTE,
    "cattr_accessor": MacroKind.ATTR_ACCESSOR,
    "mattr_accessor": MacroKind.ATTR_ACCESSOR,
    "thread_cattr_accessor": MacroKind.ATTR_ACCESSOR,
    "thread_mattr_accessor": MacroKind.ATTR_ACCESSOR,
    "cattr_reader": MacroKind.ATTR_READER,
    "mattr_reader": MacroKind.ATTR_READER,
    "thread_cattr_reader": MacroKind.ATTR_READER,
    "thread_mattr_reader": MacroKind.ATTR_READER,
    "cattr_writer": MacroKind.ATTR_WRITER,
    "mattr_writer": MacroKind.ATTR_WRITER,
    "thread_cattr_writer": MacroKind.ATTR_WRITER,
    "thread_mattr_writer": MacroKind.ATTR_WRITER,
    "include": MacroKind.INCLUDE,
}

VISIBILITY_KEYWORDS = {
    "private": True,
    "protected": True,
    "public": False,
}


def get_macro_kind(method_name: str):
    return MACRO_KINDS.get(method_name)


def is_macro(method_name: str) -> bool:
    return method_name in MACRO_KINDS
