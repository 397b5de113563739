from __future__ import annotations

import pytest

from commit_coach.analysis.models import ChangedFile
from commit_coach.analysis.semantic import SemanticAnalyzer
from commit_coach.insights import rules
from commit_coach.insights.rules import Rule
from commit_coach.insights.rules import RuleConfigError
from commit_coach.insights.rules import RuleContext
from commit_coach.insights.rules import RuleRegistry
from commit_coach.insights.rules import build_default_registry


def _file(path: str, diff: str = "", status: str = "modified", additions: int = 1, deletions: int = 0) -> ChangedFile:
    return ChangedFile(path=path, status=status, additions=additions, deletions=deletions, diff=diff)


def _context(commit) -> RuleContext:
    return RuleContext.build(commit=commit, analysis=SemanticAnalyzer().analyze(commit))


def test_default_registry_ids_are_unique_and_ordered() -> None:
    registry = build_default_registry()
    ids = registry.ids()
    assert len(ids) == len(set(ids)) == len(registry)
    assert ids[0] == "missing-tests"
    assert "sql-injection-risk" in registry
    assert "no-such-rule" not in registry


def test_registry_rejects_duplicates_and_unknown_lookups() -> None:
    rule = Rule("x", "info", lambda ctx: None)
    with pytest.raises(RuleConfigError):
        RuleRegistry([rule, rule])
    with pytest.raises(RuleConfigError):
        RuleRegistry([rule]).get("y")


def test_context_totals(make_commit) -> None:
    commit = make_commit(
        files=[_file("src/a.py", additions=30, deletions=5), _file("README.md", additions=40, deletions=1)]
    )
    ctx = _context(commit)
    assert ctx.total_lines == 76
    assert ctx.total_additions == 70
    assert ctx.source_additions == 30


def test_large_commit_boundary(make_commit) -> None:
    at_limit = make_commit(files=[_file("a.txt", additions=200)])
    assert rules.large_commit(_context(at_limit)) is None
    over = make_commit(files=[_file("a.txt", additions=201)])
    assert rules.large_commit(_context(over)).metadata == {"totalLines": 201, "fileCount": 1}


def test_short_commit_message_boundary(make_commit) -> None:
    assert rules.short_commit_message(_context(make_commit(files=[_file("a.txt")], message="0123456789"))) is None
    insight = rules.short_commit_message(_context(make_commit(files=[_file("a.txt")], message="012345678")))
    assert insight.type == "suggestion"
    assert "9 characters" in insight.message


def test_public_api_added(make_commit) -> None:
    commit = make_commit(files=[_file("src/api.ts", "+export interface Options {}\n+export class Client {}")])
    insight = rules.public_api_added(_context(commit))
    assert insight.type == "info"
    assert insight.confidence == 0.8
    assert "Options" in insight.message and "Client" in insight.message


def test_documentation_updated_and_missing(make_commit) -> None:
    documented = make_commit(
        files=[_file("src/a.js", additions=80), _file("README.md", "+Added new feature flags support")]
    )
    ctx = _context(documented)
    assert rules.documentation_updated(ctx).confidence == 0.9
    assert rules.missing_documentation(ctx) is None

    undocumented = make_commit(files=[_file("src/a.js", additions=51)])
    insight = rules.missing_documentation(_context(undocumented))
    assert insight.type == "suggestion"
    assert insight.confidence == 0.6

    docs_only = make_commit(files=[_file("notes.txt", additions=500)])
    assert rules.missing_documentation(_context(docs_only)) is None


def test_feature_flags_added(make_commit) -> None:
    commit = make_commit(files=[_file("src/flags.js", "+if (flags.darkMode) {}")])
    insight = rules.feature_flags_added(_context(commit))
    assert insight.confidence == 0.7
    assert "darkMode" in insight.message


def test_todo_and_debug(make_commit) -> None:
    ctx = _context(make_commit(files=[_file("src/a.js", "+// FIXME later\n+debugger;")]))
    assert rules.todo_comments(ctx).metadata == {"hasTodos": True}
    debug = rules.debug_code(ctx)
    assert debug.type == "warning"
    assert debug.metadata == {"markers": ["debugger"]}


def test_large_file_addition_only_for_added_files(make_commit) -> None:
    added = make_commit(files=[_file("gen/big.js", status="added", additions=1001)])
    assert rules.large_file_addition(_context(added)).metadata["files"] == [{"path": "gen/big.js", "additions": 1001}]
    modified = make_commit(files=[_file("gen/big.js", status="modified", additions=5000)])
    assert rules.large_file_addition(_context(modified)) is None


def test_missing_error_handling(make_commit) -> None:
    ctx = _context(make_commit(files=[_file("src/a.js", "+async function load() { return fetch(u); }")]))
    assert rules.missing_error_handling(ctx).type == "warning"


def test_typescript_any(make_commit) -> None:
    ctx = _context(make_commit(files=[_file("src/a.ts", "+function f(x: any) {}")]))
    assert rules.typescript_any_type(ctx).confidence == 0.7


def test_hardcoded_secret_does_not_echo_token(make_commit) -> None:
    token = "sk_live_" + "A1b2C3d4E5f6"
    ctx = _context(make_commit(files=[_file("src/pay.js", f'+const key = "{token}";')]))
    insight = rules.hardcoded_secrets(ctx)
    assert insight.type == "error"
    assert token not in insight.message
    assert insight.metadata == {"matchCount": 1}


def test_merge_conflict_markers(make_commit) -> None:
    ctx = _context(make_commit(files=[_file("src/a.js", "+<<<<<<< HEAD\n+x\n+=======\n+y\n+>>>>>>> main")]))
    assert rules.merge_conflict_markers(ctx).confidence == 1.0


def test_sql_injection_risk(make_commit) -> None:
    ctx = _context(make_commit(files=[_file("app/db.py", '+cursor.query(f"SELECT * FROM t WHERE id={uid}")')]))
    insight = rules.sql_injection_risk(ctx)
    assert insight.type == "error"
    assert len(insight.metadata["lines"]) == 1


def test_clean_commit_triggers_nothing(make_commit) -> None:
    commit = make_commit(
        files=[
            _file("src/util.py", "+def helper():\n+    return 1", additions=2),
            _file("src/util.test.py", "+def test_helper():\n+    assert helper() == 1", status="added", additions=2),
        ]
    )
    ctx = _context(commit)
    fired = [rule.id for rule in build_default_registry() if rule.evaluate(ctx) is not None]
    assert fired == ["tests-added"]
