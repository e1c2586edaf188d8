from __future__ import annotations

import re

from chainkit import ConfigNamespace, TransformRef


def lower(value: str) -> str:
    return value.lower()


def upper(value: str) -> str:
    return value.upper()


def trim(value: str) -> str:
    return value.strip()


def collapse_whitespace(value: str) -> str:
    return " ".join(value.split())


def drop_hello(value: str) -> str:
    # Case-sensitive: "Hello" survives, "hello" does not.
    return value.replace("hello", "")


def make_drop_words(words: list[str], *, case_sensitive: bool = True):
    """Return a transform that removes every occurrence of each word in `words`."""

    if not words:
        raise ValueError("drop_words needs at least one word")
    flags = 0 if case_sensitive else re.IGNORECASE
    pattern = re.compile("|".join(re.escape(word) for word in words), flags)

    def drop_words(value: str) -> str:
        return pattern.sub("", value)

    return drop_words


def build_drop_words(cfg: ConfigNamespace) -> TransformRef:
    words = cfg.get_list_str("words", default=["hello"])
    case_sensitive = cfg.get_bool("case_sensitive", default=True)
    return TransformRef(
        id="drop_words",
        fn=make_drop_words(words, case_sensitive=case_sensitive),
        doc=f"Remove configured words ({', '.join(words)}).",
        source=f"{__name__}.make_drop_words",
        tags=("text", "configurable"),
    )


__all_transforms__ = [
    TransformRef(id="lower", fn=lower, doc="Lowercase the text.", source=f"{__name__}.lower", tags=("text", "case")),
    TransformRef(id="upper", fn=upper, doc="Uppercase the text.", source=f"{__name__}.upper", tags=("text", "case")),
    TransformRef(
        id="trim",
        fn=trim,
        doc="Strip leading and trailing whitespace.",
        source=f"{__name__}.trim",
        tags=("text", "whitespace"),
    ),
    TransformRef(
        id="collapse_whitespace",
        fn=collapse_whitespace,
        doc="Collapse whitespace runs to single spaces and trim the ends.",
        source=f"{__name__}.collapse_whitespace",
        tags=("text", "whitespace"),
    ),
    TransformRef(
        id="drop_hello",
        fn=drop_hello,
        doc='Remove every occurrence of "hello" (case-sensitive).',
        source=f"{__name__}.drop_hello",
        tags=("text", "words"),
    ),
]
