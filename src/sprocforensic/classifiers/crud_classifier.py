"""CRUD intent classification — ordered name rules with a body-analysis fallback."""

from __future__ import annotations

import re
from dataclasses import dataclass

from sprocforensic.utils.sql_patterns import (
    DELETE_PATTERN,
    GROUP_BY_PATTERN,
    INSERT_PATTERN,
    MERGE_PATTERN,
    SELECT_FROM_PATTERN,
    UPDATE_PATTERN,
)

CRUD_TYPES = ("get", "insert", "update", "delete", "report", "mixed")

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

_SELECT_RE = re.compile(SELECT_FROM_PATTERN, re.IGNORECASE)
_INSERT_RE = re.compile(INSERT_PATTERN, re.IGNORECASE)
_UPDATE_RE = re.compile(UPDATE_PATTERN, re.IGNORECASE)
_DELETE_RE = re.compile(DELETE_PATTERN, re.IGNORECASE)
_MERGE_RE = re.compile(MERGE_PATTERN, re.IGNORECASE)
_GROUP_BY_RE = re.compile(GROUP_BY_PATTERN, re.IGNORECASE)


@dataclass(frozen=True)
class NameRule:
    """Maps procedure names whose words match ``pattern`` to ``crud_type``."""

    crud_type: str
    pattern: re.Pattern[str]

    def matches(self, words: str) -> bool:
        return bool(self.pattern.search(words))


def _rule(crud_type: str, *words: str) -> NameRule:
    return NameRule(crud_type, re.compile(r"\b(?:" + "|".join(words) + r")\b"))


# First match wins: report names beat generic get names, which beat writes.
NAME_RULES: tuple[NameRule, ...] = (
    _rule("report", "report", "reports", "rpt", "summary", "dashboard", "stats",
          "statistics", "export", "analytics", "chart"),
    _rule("get", "get", "select", "fetch", "load", "find", "search", "list",
          "lookup", "read", "retrieve", "view"),
    _rule("insert", "insert", "ins", "add", "create", "new"),
    _rule("update", "update", "upd", "modify", "edit", "change"),
    _rule("delete", "delete", "remove", "purge"),
    _rule("mixed", "upsert", "merge", "sync", "import"),
)


def name_words(name: str) -> str:
    """Split a procedure name into lowercase words.

    Underscores and CamelCase boundaries both separate words:
    ``usp_GetUserByID`` -> ``"usp get user by id"``.
    """
    words: list[str] = []
    for segment in name.split("_"):
        words.extend(_WORD_RE.findall(segment))
    return " ".join(w.lower() for w in words)


class CrudClassifier:
    """Assign a CRUD intent category to a procedure."""

    def __init__(self, rules: tuple[NameRule, ...] = NAME_RULES) -> None:
        self.rules = rules

    def classify(self, name: str, stripped_body: str) -> str:
        """Classify by name first, then by the comment-stripped body."""
        by_name = self.classify_name(name)
        if by_name is not None:
            return by_name
        return self.classify_body(stripped_body)

    def classify_name(self, name: str) -> str | None:
        words = name_words(name)
        for rule in self.rules:
            if rule.matches(words):
                return rule.crud_type
        return None

    @staticmethod
    def classify_body(stripped_body: str) -> str:
        """Classify from the statements present in the body.

        Writes into ``@table`` variables and ``#temp`` tables are not counted
        as mutations.
        """
        has_select = bool(_SELECT_RE.search(stripped_body))
        has_group_by = bool(_GROUP_BY_RE.search(stripped_body))
        has_merge = bool(_MERGE_RE.search(stripped_body))
        mutations = [
            verb
            for verb, regex in (
                ("insert", _INSERT_RE),
                ("update", _UPDATE_RE),
                ("delete", _DELETE_RE),
            )
            if regex.search(stripped_body)
        ]

        if has_group_by and has_select and not mutations and not has_merge:
            return "report"
        if has_merge or len(mutations) >= 2:
            return "mixed"
        if len(mutations) == 1:
            return mutations[0]
        if has_select:
            return "get"
        return "mixed"
